"""
Medication/event correlation.

An event is credited to at most one dosage: the nearest administered
dosage at or before the event, provided the event falls inside that
dosage's lookahead window [t, t + 24h]. Dosages sharing a timestamp
resolve to the first one supplied.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

import pandas as pd

from medtrack_analytics.analytics.frames import tally, timestamp_frame
from medtrack_analytics.analytics.time_window import administered_only, apply, for_medications, select
from medtrack_analytics.core.config import CONFIDENCE_SAMPLE, EVENT_LOOKAHEAD
from medtrack_analytics.models.records import (
    DosageRecord, EventCategory, EventSeverity, MedicalEvent, Medication
)
from medtrack_analytics.models.results import CorrelationResult, percentage

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditedEvent:
    event: MedicalEvent
    dosage: DosageRecord


def credit_events(
    dosages: Sequence[DosageRecord],
    events: Sequence[MedicalEvent],
    lookahead: timedelta = EVENT_LOOKAHEAD,
) -> list[CreditedEvent]:
    """Attribute events to administered dosages; result is in event-time order."""
    administered = [d for d in dosages if d.administered]
    if not administered or not events:
        return []

    doses = timestamp_frame(administered, "dosage_idx")
    doses = doses.sort_values(["ts", "dosage_idx"], kind="mergesort")
    doses = doses.drop_duplicates(subset=["ts"], keep="first")

    evs = timestamp_frame(events, "event_idx").sort_values(["ts", "event_idx"], kind="mergesort")

    merged = pd.merge_asof(
        evs, doses, on="ts",
        direction="backward",
        allow_exact_matches=True,
        tolerance=pd.Timedelta(lookahead),
    )
    merged = merged.dropna(subset=["dosage_idx"])
    return [
        CreditedEvent(events[int(e)], administered[int(d)])
        for e, d in zip(merged["event_idx"], merged["dosage_idx"])
    ]


def correlation_strength(correlation_pct: float, total_dosages: int) -> float:
    """Percentage scaled to [0, 1], damped for small samples."""
    if total_dosages <= 0:
        return 0.0
    scaled = min(max(correlation_pct, 0.0) / 100.0, 1.0)
    confidence = min(total_dosages / CONFIDENCE_SAMPLE, 1.0)
    return scaled * confidence


def analyze_correlation(
    medication: Medication,
    dosages: Sequence[DosageRecord],
    events: Sequence[MedicalEvent],
    patient_id=None,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> CorrelationResult:
    in_range = select(dosages, start, end)
    med_dosages = apply(in_range, for_medications([medication.id]), administered_only)

    credited = credit_events(med_dosages, events)
    total = len(med_dosages)
    after = len(credited)
    pct = min(max(percentage(after, total), 0.0), 100.0)

    log.debug("Correlation %s: %d dosages, %d credited events", medication.id, total, after)
    return CorrelationResult(
        medication_id=medication.id,
        medication_name=medication.display_name,
        patient_id=patient_id,
        total_dosages=total,
        events_after_dosage=after,
        correlation_percentage=pct,
        correlation_strength=correlation_strength(pct, total),
        events_by_category=tally((c.event.category for c in credited), EventCategory),
        events_by_severity=tally((c.event.severity for c in credited), EventSeverity),
        generated_at=now or datetime.now(),
    )


def analyze_all_correlations(
    medications: Sequence[Medication],
    dosages: Sequence[DosageRecord],
    events: Sequence[MedicalEvent],
    patient_id=None,
    max_workers: int | None = None,
    now: datetime | None = None,
) -> list[CorrelationResult]:
    """One result per medication, in input order; threaded when max_workers > 1."""
    def _one(med: Medication) -> CorrelationResult:
        own = [d for d in dosages if d.medication_id == med.id]
        return analyze_correlation(med, own, events, patient_id=patient_id, now=now)

    if not max_workers or max_workers <= 1:
        return [_one(m) for m in medications]

    log.info("Running %d correlation analyses on %d workers", len(medications), max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_one, medications))
