"""
Merge dosages and medical events into a single chronological timeline.
"""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Sequence

from medtrack_analytics.analytics.frames import timestamp_frame
from medtrack_analytics.analytics.time_window import for_patient, apply, select
from medtrack_analytics.models.records import DosageRecord, MedicalEvent
from medtrack_analytics.models.results import DOSAGE, EVENT, TimelineAnalysis, TimelinePoint

log = logging.getLogger(__name__)

DOSAGE_DESCRIPTION = "Medication Administration"
# tie-break rank: a dose at the same instant sorts before the event
KIND_RANK = {DOSAGE: 0, EVENT: 1}


def _dosage_point(dosage: DosageRecord) -> TimelinePoint:
    return TimelinePoint(
        timestamp=dosage.administration_time,
        kind=DOSAGE,
        description=DOSAGE_DESCRIPTION,
        value=dosage.amount,
        unit=dosage.unit,
    )


def _event_point(event: MedicalEvent) -> TimelinePoint:
    description = event.title or ""
    if event.description:
        description = f"{description}: {event.description}" if description else event.description
    return TimelinePoint(
        timestamp=event.event_time,
        kind=EVENT,
        description=description,
        severity=event.severity,
        bmi=event.bmi,
    )


def build_timeline(dosages: Sequence[DosageRecord], events: Sequence[MedicalEvent]) -> list[TimelinePoint]:
    """Ascending by timestamp, DOSAGE before EVENT on ties, input order otherwise."""
    points = [_dosage_point(d) for d in dosages] + [_event_point(e) for e in events]
    if not points:
        return []

    frame = timestamp_frame(points, "pos")
    frame["rank"] = [KIND_RANK[p.kind] for p in points]
    frame = frame.sort_values(["ts", "rank", "pos"], kind="mergesort")
    return [points[int(i)] for i in frame["pos"]]


def build_timeline_analysis(
    patient_id,
    dosages: Sequence[DosageRecord],
    events: Sequence[MedicalEvent],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> TimelineAnalysis:
    dosages = apply(select(dosages, start, end), for_patient(patient_id))
    events = apply(select(events, start, end), for_patient(patient_id))
    points = build_timeline(dosages, events)
    log.debug("Timeline for %s: %d points", patient_id, len(points))
    return TimelineAnalysis(
        patient_id=patient_id,
        period_start=start,
        period_end=end,
        points=tuple(points),
        generated_at=now or datetime.now(),
    )
