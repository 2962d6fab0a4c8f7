"""
Time-window selection and composable record filters.

Filters are plain predicates over in-memory records so they can be chained
with `apply`; an empty or None criterion matches every record.
"""

from __future__ import annotations
from datetime import datetime
from typing import Callable, Iterable, Sequence, TypeVar

from medtrack_analytics.core.errors import InvalidRangeError
from medtrack_analytics.models.records import DosageRecord, EventCategory, EventSeverity

R = TypeVar("R")
Predicate = Callable[[object], bool]


def validate_range(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and start > end:
        raise InvalidRangeError(start, end)


def select(records: Iterable[R], start: datetime | None = None, end: datetime | None = None) -> list[R]:
    """Records with start <= timestamp <= end, in input order."""
    validate_range(start, end)
    in_range = between(start, end)
    return [r for r in records if in_range(r)]


def apply(records: Iterable[R], *predicates: Predicate) -> list[R]:
    return [r for r in records if all(p(r) for p in predicates)]


def between(start: datetime | None, end: datetime | None) -> Predicate:
    def _match(record) -> bool:
        t = record.timestamp
        if start is not None and t < start:
            return False
        if end is not None and t > end:
            return False
        return True
    return _match


def for_patient(patient_id) -> Predicate:
    if patient_id is None:
        return lambda r: True
    return lambda r: r.patient_id == patient_id


def for_medications(medication_ids: Sequence | None) -> Predicate:
    if not medication_ids:
        return lambda r: True
    wanted = set(medication_ids)
    return lambda r: r.medication_id in wanted


def with_categories(categories: Sequence[EventCategory] | None) -> Predicate:
    if not categories:
        return lambda r: True
    wanted = set(categories)
    return lambda r: r.category in wanted


def with_severities(severities: Sequence[EventSeverity] | None) -> Predicate:
    if not severities:
        return lambda r: True
    wanted = set(severities)
    return lambda r: r.severity in wanted


def containing_text(text: str | None) -> Predicate:
    if text is None or not text.strip():
        return lambda r: True
    needle = text.strip().lower()

    def _match(record) -> bool:
        title = (record.title or "").lower()
        description = (record.description or "").lower()
        return needle in title or needle in description
    return _match


def administered_only(record: DosageRecord) -> bool:
    return record.administered
