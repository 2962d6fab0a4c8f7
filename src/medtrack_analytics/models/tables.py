"""
ORM models for the medication tracking database.
"""

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, ForeignKey, Numeric, Text, Enum
)
from medtrack_analytics.models.records import DosageSchedule, EventCategory, EventSeverity

class Base(DeclarativeBase):
    pass

class MedicationRow(Base):
    __tablename__ = "medications"

    medication_id = Column(String(36), primary_key=True)
    name          = Column(String(100))
    start_date    = Column(DateTime)

class DosageRow(Base):
    __tablename__ = "medication_dosages"

    id                  = Column(Integer, primary_key=True, autoincrement=True)
    patient_id          = Column(String(36), nullable=False, index=True)
    medication_id       = Column(String(36), ForeignKey("medications.medication_id"), nullable=False, index=True)
    administration_time = Column(DateTime, nullable=False)
    amount              = Column(Numeric(10, 3), nullable=False)
    unit                = Column(String(20))
    schedule            = Column(Enum(DosageSchedule, native_enum=False), nullable=False)
    administered        = Column(Boolean, nullable=False, default=False)
    notes               = Column(Text)

class EventRow(Base):
    __tablename__ = "medical_events"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    patient_id    = Column(String(36), nullable=False, index=True)
    medication_id = Column(String(36), ForeignKey("medications.medication_id"))
    event_time    = Column(DateTime, nullable=False)
    title         = Column(String(200))
    description   = Column(Text)
    severity      = Column(Enum(EventSeverity, native_enum=False), nullable=False)
    category      = Column(Enum(EventCategory, native_enum=False), nullable=False)
    weight_kg     = Column(Numeric(5, 2))
    height_cm     = Column(Numeric(5, 2))
