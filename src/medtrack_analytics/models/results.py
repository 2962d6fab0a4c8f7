"""
Result DTOs produced by the analytics components.

Every result is built fresh on each call and never persisted. Derived
metrics are properties recomputed from the stored fields.
"""

from __future__ import annotations
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from medtrack_analytics.core.config import NORMALIZATION_DAYS, RECENT_ACTIVITY_RATIO
from medtrack_analytics.models.records import EventCategory, EventSeverity

DOSAGE = "DOSAGE"
EVENT = "EVENT"
BEFORE_MEDICATION = "before_medication"
AFTER_MEDICATION = "after_medication"


def percentage(part: float, whole: float) -> float:
    """part / whole * 100, or 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return part / whole * 100.0


def most_common(counts: Mapping, enum_cls: type[Enum]):
    """Key with the highest count; ties go to the first declared member."""
    best, best_count = None, 0
    for member in enum_cls:
        count = counts.get(member, 0)
        if count > best_count:
            best, best_count = member, count
    return best


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class _Serializable:
    def to_dict(self) -> dict:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


class _CountMaps:
    """Stores the per-category and per-severity counts as read-only views."""

    def __post_init__(self):
        for name in ("events_by_category", "events_by_severity"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


@dataclass(frozen=True)
class CorrelationResult(_CountMaps, _Serializable):
    medication_id: str
    medication_name: str
    patient_id: str | None
    total_dosages: int
    events_after_dosage: int
    correlation_percentage: float
    correlation_strength: float
    events_by_category: Mapping[EventCategory, int]
    events_by_severity: Mapping[EventSeverity, int]
    generated_at: datetime

    @property
    def risk_level(self) -> str:
        if self.correlation_strength >= 0.8:
            return "CRITICAL"
        if self.correlation_strength >= 0.6:
            return "HIGH"
        if self.correlation_strength >= 0.4:
            return "MODERATE"
        return "LOW"

    @property
    def has_strong_correlation(self) -> bool:
        return self.correlation_strength >= 0.7

    @property
    def has_concerning_adverse_reactions(self) -> bool:
        if not self.events_after_dosage:
            return False
        adverse = self.events_by_category.get(EventCategory.ADVERSE_REACTION, 0)
        return adverse / self.events_after_dosage > 0.2

    @property
    def most_common_event_category(self) -> EventCategory | None:
        return most_common(self.events_by_category, EventCategory)

    @property
    def most_common_event_severity(self) -> EventSeverity | None:
        return most_common(self.events_by_severity, EventSeverity)


@dataclass(frozen=True)
class TimelinePoint(_Serializable):
    timestamp: datetime
    kind: str
    description: str
    value: Decimal | None = None
    unit: str | None = None
    severity: EventSeverity | None = None
    bmi: Decimal | None = None

    @property
    def is_dosage(self) -> bool:
        return self.kind == DOSAGE

    @property
    def is_event(self) -> bool:
        return self.kind == EVENT

    @property
    def is_high_severity(self) -> bool:
        return self.severity is not None and self.severity.is_high

    @property
    def formatted_value(self) -> str:
        if self.value is None:
            return ""
        if self.unit and self.unit.strip():
            return f"{self.value} {self.unit}"
        return str(self.value)


@dataclass(frozen=True)
class TimelineAnalysis(_Serializable):
    patient_id: str | None
    period_start: datetime | None
    period_end: datetime | None
    points: tuple[TimelinePoint, ...]
    generated_at: datetime

    @property
    def dosage_points(self) -> list[TimelinePoint]:
        return [p for p in self.points if p.is_dosage]

    @property
    def event_points(self) -> list[TimelinePoint]:
        return [p for p in self.points if p.is_event]

    @property
    def high_severity_events(self) -> list[TimelinePoint]:
        return [p for p in self.points if p.is_high_severity]

    @property
    def total_dosages(self) -> int:
        return len(self.dosage_points)

    @property
    def total_events(self) -> int:
        return len(self.event_points)

    @property
    def has_data(self) -> bool:
        return bool(self.points)

    @property
    def period_days(self) -> int:
        if self.period_start is None or self.period_end is None:
            return 0
        seconds = (self.period_end - self.period_start).total_seconds()
        return max(0, math.ceil(seconds / 86400))

    def statistics(self) -> dict:
        stats = {
            "total_data_points": len(self.points),
            "medical_events": self.total_events,
            "medication_dosages": self.total_dosages,
        }
        if self.points:
            span = self.points[-1].timestamp - self.points[0].timestamp
            stats["time_span_days"] = span.days
        return stats

    def patterns(self) -> list[str]:
        found = []
        if not self.points:
            return found
        events, dosages = self.total_events, self.total_dosages
        if events > dosages * 1.5:
            found.append("High event frequency relative to medication dosages")
        elif dosages > events * 2:
            found.append("Consistent medication administration with low event frequency")
        if len(self.points) > 10:
            found.append("Dense activity period with multiple data points")
        return found


@dataclass(frozen=True)
class DashboardSummary(_CountMaps, _Serializable):
    patient_id: str | None
    total_events: int
    total_dosages: int
    events_by_category: Mapping[EventCategory, int]
    events_by_severity: Mapping[EventSeverity, int]
    recent_events_last_7_days: int
    generated_at: datetime

    @property
    def average_events_per_day(self) -> float:
        return self.total_events / NORMALIZATION_DAYS

    @property
    def average_dosages_per_day(self) -> float:
        return self.total_dosages / NORMALIZATION_DAYS

    @property
    def has_increased_recent_activity(self) -> bool:
        if self.total_events <= 0:
            return False
        return self.recent_events_last_7_days / self.total_events > RECENT_ACTIVITY_RATIO

    @property
    def most_common_event_category(self) -> EventCategory | None:
        return most_common(self.events_by_category, EventCategory)

    @property
    def most_common_event_severity(self) -> EventSeverity | None:
        return most_common(self.events_by_severity, EventSeverity)

    @property
    def high_severity_event_percentage(self) -> float:
        high = sum(self.events_by_severity.get(s, 0) for s in EventSeverity if s.is_high)
        return percentage(high, self.total_events)


@dataclass(frozen=True)
class WeeklyTrendBucket(_Serializable):
    week_index: int
    week_start: datetime
    week_end: datetime
    phase: str
    event_count: int


@dataclass(frozen=True)
class ImpactAnalysis(_Serializable):
    medication_id: str
    medication_name: str
    patient_id: str | None
    analysis_period_start: datetime
    analysis_period_end: datetime
    total_dosages: int
    events_within_24_hours: int
    event_rate_percentage: float
    symptom_events: int
    adverse_reaction_events: int
    symptom_reduction_percentage: float
    effectiveness_score: float
    weekly_trends: tuple[WeeklyTrendBucket, ...] = field(default_factory=tuple)
    generated_at: datetime | None = None

    @property
    def effectiveness_category(self) -> str:
        score = self.effectiveness_score
        if score >= 0.8:
            return "EXCELLENT"
        if score >= 0.6:
            return "GOOD"
        if score >= 0.4:
            return "MODERATE"
        if score >= 0.2:
            return "POOR"
        return "INEFFECTIVE"

    @property
    def is_highly_effective(self) -> bool:
        return self.effectiveness_score >= 0.7

    @property
    def adverse_reaction_rate(self) -> float:
        return percentage(self.adverse_reaction_events, self.events_within_24_hours)

    @property
    def symptom_event_rate(self) -> float:
        return percentage(self.symptom_events, self.events_within_24_hours)

    @property
    def has_concerning_side_effects(self) -> bool:
        return self.adverse_reaction_rate > 25.0

    @property
    def shows_good_symptom_control(self) -> bool:
        return self.symptom_reduction_percentage >= 50.0

    @property
    def period_days(self) -> int:
        return (self.analysis_period_end - self.analysis_period_start).days

    @property
    def average_dosages_per_day(self) -> float:
        days = self.period_days
        return self.total_dosages / days if days else 0.0

    def trends_by_phase(self) -> dict[str, list[int]]:
        trends = {BEFORE_MEDICATION: [], AFTER_MEDICATION: []}
        for bucket in self.weekly_trends:
            trends[bucket.phase].append(bucket.event_count)
        return trends
