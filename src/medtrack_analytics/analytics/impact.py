"""
Before/after impact of a medication over an analysis window.

Credited events follow the same rule as the correlation analysis. The
symptom reduction compares the per-day rate of SYMPTOM events recorded in
the first half of the window with the second half. Weekly buckets run in
seven-day steps from the window start and are labelled relative to the
medication start date.
"""

from __future__ import annotations
import logging
import math
from datetime import datetime
from typing import Sequence

import pandas as pd

from medtrack_analytics.analytics.correlation import credit_events
from medtrack_analytics.analytics.frames import timestamp_frame
from medtrack_analytics.analytics.time_window import (
    administered_only, apply, for_medications, select, validate_range, with_categories
)
from medtrack_analytics.core.config import TREND_BUCKET
from medtrack_analytics.models.records import DosageRecord, EventCategory, MedicalEvent, Medication
from medtrack_analytics.models.results import (
    AFTER_MEDICATION, BEFORE_MEDICATION, ImpactAnalysis, WeeklyTrendBucket, percentage
)

log = logging.getLogger(__name__)

SYMPTOM_WEIGHT = 0.6
ADVERSE_WEIGHT = 0.4


def symptom_reduction(events: Sequence[MedicalEvent], start: datetime, end: datetime) -> float:
    """(first-half rate - second-half rate) / first-half rate * 100, clamped to [-100, 100]."""
    midpoint = start + (end - start) / 2
    half_days = (midpoint - start).total_seconds() / 86400
    if half_days <= 0:
        return 0.0

    symptoms = apply(select(events, start, end), with_categories([EventCategory.SYMPTOM]))
    first = sum(1 for e in symptoms if e.event_time < midpoint)
    second = len(symptoms) - first
    first_rate = first / half_days
    second_rate = second / half_days
    if first_rate == 0:
        return 0.0
    reduction = (first_rate - second_rate) / first_rate * 100.0
    return max(-100.0, min(100.0, reduction))


def effectiveness_score(reduction_pct: float, adverse_events: int, credited_events: int) -> float:
    symptom_part = (reduction_pct + 100.0) / 200.0
    adverse_rate = adverse_events / credited_events if credited_events else 0.0
    score = SYMPTOM_WEIGHT * symptom_part + ADVERSE_WEIGHT * (1.0 - adverse_rate)
    return max(0.0, min(1.0, score))


def _anchor(medication: Medication, dosages: Sequence[DosageRecord], start: datetime) -> datetime:
    if medication.start_date is not None:
        return medication.start_date
    if dosages:
        return min(d.administration_time for d in dosages)
    return start


def weekly_trends(
    credited: Sequence[MedicalEvent],
    start: datetime,
    end: datetime,
    anchor: datetime,
) -> tuple[WeeklyTrendBucket, ...]:
    """Seven-day buckets from start; the last one is cut short at end."""
    n_buckets = max(1, math.ceil((end - start) / TREND_BUCKET))
    counts = pd.Series(0, index=range(n_buckets), dtype="int64")

    in_window = select(credited, start, end)
    if in_window:
        frame = timestamp_frame(in_window)
        offsets = (frame["ts"] - pd.Timestamp(start)) // pd.Timedelta(TREND_BUCKET)
        hits = offsets.clip(upper=n_buckets - 1).value_counts()
        counts = counts.add(hits, fill_value=0).astype("int64")

    buckets = []
    for i in range(n_buckets):
        week_start = start + i * TREND_BUCKET
        week_end = min(start + (i + 1) * TREND_BUCKET, end)
        phase = BEFORE_MEDICATION if week_end <= anchor else AFTER_MEDICATION
        buckets.append(WeeklyTrendBucket(i + 1, week_start, week_end, phase, int(counts[i])))
    return tuple(buckets)


def analyze_impact(
    medication: Medication,
    patient_id,
    dosages: Sequence[DosageRecord],
    events: Sequence[MedicalEvent],
    window_start: datetime,
    window_end: datetime,
    now: datetime | None = None,
) -> ImpactAnalysis:
    validate_range(window_start, window_end)
    med_dosages = apply(
        select(dosages, window_start, window_end),
        for_medications([medication.id]),
        administered_only,
    )
    anchor = _anchor(medication, med_dosages, window_start)

    if not med_dosages:
        log.info("No administered dosages of %s in window; returning empty impact", medication.id)
        return ImpactAnalysis(
            medication_id=medication.id,
            medication_name=medication.display_name,
            patient_id=patient_id,
            analysis_period_start=window_start,
            analysis_period_end=window_end,
            total_dosages=0,
            events_within_24_hours=0,
            event_rate_percentage=0.0,
            symptom_events=0,
            adverse_reaction_events=0,
            symptom_reduction_percentage=0.0,
            effectiveness_score=0.0,
            weekly_trends=weekly_trends([], window_start, window_end, anchor),
            generated_at=now or datetime.now(),
        )

    credited = [c.event for c in credit_events(med_dosages, events)]
    symptoms = sum(1 for e in credited if e.category == EventCategory.SYMPTOM)
    adverse = sum(1 for e in credited if e.category == EventCategory.ADVERSE_REACTION)
    reduction = symptom_reduction(events, window_start, window_end)

    return ImpactAnalysis(
        medication_id=medication.id,
        medication_name=medication.display_name,
        patient_id=patient_id,
        analysis_period_start=window_start,
        analysis_period_end=window_end,
        total_dosages=len(med_dosages),
        events_within_24_hours=len(credited),
        event_rate_percentage=percentage(len(credited), len(med_dosages)),
        symptom_events=symptoms,
        adverse_reaction_events=adverse,
        symptom_reduction_percentage=reduction,
        effectiveness_score=effectiveness_score(reduction, adverse, len(credited)),
        weekly_trends=weekly_trends(credited, window_start, window_end, anchor),
        generated_at=now or datetime.now(),
    )
