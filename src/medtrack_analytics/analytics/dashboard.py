"""
Patient-level dashboard roll-ups.
"""

from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Sequence

from medtrack_analytics.analytics.frames import tally, timestamp_frame
from medtrack_analytics.analytics.time_window import select
from medtrack_analytics.core.config import RECENT_WINDOW, WEEKLY_SUMMARY_WEEKS
from medtrack_analytics.models.records import DosageRecord, EventCategory, EventSeverity, MedicalEvent
from medtrack_analytics.models.results import DashboardSummary

log = logging.getLogger(__name__)


def count_since(events: Sequence[MedicalEvent], cutoff: datetime) -> int:
    if not events:
        return 0
    frame = timestamp_frame(events)
    return int((frame["ts"] >= cutoff).sum())


def summarize(
    events: Sequence[MedicalEvent],
    dosages: Sequence[DosageRecord],
    as_of: datetime,
    patient_id=None,
    now: datetime | None = None,
) -> DashboardSummary:
    """Totals and distributions over the full supplied lists; no time filtering."""
    recent = count_since(events, as_of - RECENT_WINDOW)
    return DashboardSummary(
        patient_id=patient_id,
        total_events=len(events),
        total_dosages=len(dosages),
        events_by_category=tally((e.category for e in events), EventCategory),
        events_by_severity=tally((e.severity for e in events), EventSeverity),
        recent_events_last_7_days=recent,
        generated_at=now or datetime.now(),
    )


def weekly_summaries(
    events: Sequence[MedicalEvent],
    dosages: Sequence[DosageRecord],
    as_of: datetime,
    patient_id=None,
    weeks: int = WEEKLY_SUMMARY_WEEKS,
    now: datetime | None = None,
) -> dict[str, DashboardSummary]:
    """Summaries keyed "Week 1" (seven days ending at as_of), "Week 2" (the seven before) ..."""
    summaries = {}
    for week in range(weeks):
        week_end = as_of - timedelta(weeks=week)
        week_start = as_of - timedelta(weeks=week + 1)
        week_events = select(events, week_start, week_end)
        week_dosages = select(dosages, week_start, week_end)
        summaries[f"Week {week + 1}"] = DashboardSummary(
            patient_id=patient_id,
            total_events=len(week_events),
            total_dosages=len(week_dosages),
            events_by_category=tally((e.category for e in week_events), EventCategory),
            events_by_severity=tally((e.severity for e in week_events), EventSeverity),
            recent_events_last_7_days=len(week_events),
            generated_at=now or datetime.now(),
        )
    log.debug("Built %d weekly summaries for %s", len(summaries), patient_id)
    return summaries
