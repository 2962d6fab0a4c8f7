"""
Shared builders for analytics tests
"""
from datetime import datetime, timedelta
from decimal import Decimal
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from medtrack_analytics.models import Base
from medtrack_analytics.models.records import (
    DosageRecord, DosageSchedule, EventCategory, EventSeverity, MedicalEvent, Medication
)

PATIENT = "P-0001"
MED = "M-0001"
T0 = datetime(2024, 3, 1, 8, 0, 0)


def dose(at, medication_id=MED, administered=True, amount="5", patient_id=PATIENT):
    return DosageRecord(
        patient_id=patient_id,
        medication_id=medication_id,
        administration_time=at,
        amount=Decimal(amount),
        unit="mg",
        schedule=DosageSchedule.AM,
        administered=administered,
    )


def event(at, category=EventCategory.SYMPTOM, severity=EventSeverity.MILD,
          title="Headache", patient_id=PATIENT, **kw):
    return MedicalEvent(
        patient_id=patient_id,
        event_time=at,
        severity=severity,
        category=category,
        title=title,
        **kw,
    )


def hours(n):
    return timedelta(hours=n)


@pytest.fixture
def medication():
    return Medication(id=MED, name="Levetiracetam", start_date=T0)


@pytest.fixture
def session():
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
