"""
Raw records supplied by the persistence layer.

Records are immutable snapshots; analytics never mutates them.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


class DosageSchedule(str, Enum):
    AM = "AM"
    PM = "PM"
    MIDDAY = "MIDDAY"
    BEDTIME = "BEDTIME"
    AS_NEEDED = "AS_NEEDED"
    EVERY_4_HOURS = "EVERY_4_HOURS"
    EVERY_6_HOURS = "EVERY_6_HOURS"
    EVERY_8_HOURS = "EVERY_8_HOURS"
    EVERY_12_HOURS = "EVERY_12_HOURS"
    CUSTOM = "CUSTOM"


class EventSeverity(str, Enum):
    MILD = "MILD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"
    CRITICAL = "CRITICAL"

    @property
    def is_high(self) -> bool:
        return self in (EventSeverity.SEVERE, EventSeverity.CRITICAL)


class EventCategory(str, Enum):
    SYMPTOM = "SYMPTOM"
    MEDICATION = "MEDICATION"
    APPOINTMENT = "APPOINTMENT"
    TEST = "TEST"
    EMERGENCY = "EMERGENCY"
    OBSERVATION = "OBSERVATION"
    ADVERSE_REACTION = "ADVERSE_REACTION"


HEIGHT_MIN_CM, HEIGHT_MAX_CM = 30, 300


@dataclass(frozen=True)
class Medication:
    id: str
    name: str | None = None
    start_date: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or f"Medication {str(self.id)[:8]}"


@dataclass(frozen=True)
class DosageRecord:
    patient_id: str
    medication_id: str
    administration_time: datetime
    amount: Decimal
    unit: str = "mg"
    schedule: DosageSchedule = DosageSchedule.CUSTOM
    administered: bool = True
    notes: str | None = None

    @property
    def timestamp(self) -> datetime:
        return self.administration_time


@dataclass(frozen=True)
class MedicalEvent:
    patient_id: str
    event_time: datetime
    severity: EventSeverity
    category: EventCategory
    title: str = ""
    description: str = ""
    medication_id: str | None = None
    weight_kg: Decimal | None = None
    height_cm: Decimal | None = None

    @property
    def timestamp(self) -> datetime:
        return self.event_time

    @property
    def bmi(self) -> Decimal | None:
        """BMI from the measurements taken with the event, None if unusable."""
        if self.weight_kg is None or self.height_cm is None:
            return None
        weight = Decimal(str(self.weight_kg))
        height = Decimal(str(self.height_cm))
        if weight <= 0 or height < HEIGHT_MIN_CM or height > HEIGHT_MAX_CM:
            return None
        height_m = height / Decimal(100)
        return (weight / (height_m * height_m)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
