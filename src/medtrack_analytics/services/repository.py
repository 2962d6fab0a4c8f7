"""
Persistence collaborator: fetch a patient's dosages and events as records.
"""

from __future__ import annotations
import logging
from datetime import datetime
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.orm import Session
from medtrack_analytics.analytics.time_window import validate_range
from medtrack_analytics.models import DosageRow, EventRow, MedicationRow
from medtrack_analytics.models.records import DosageRecord, MedicalEvent, Medication

log = logging.getLogger(__name__)


def _decimal(value) -> Decimal | None:
    return None if value is None else Decimal(str(value))


class RecordRepository:
    def __init__(self, session: Session):
        self.session = session

    def fetch_dosages(self, patient_id, medication_id=None,
                      start: datetime | None = None, end: datetime | None = None) -> list[DosageRecord]:
        validate_range(start, end)
        stmt = select(DosageRow).where(DosageRow.patient_id == patient_id)
        if medication_id is not None:
            stmt = stmt.where(DosageRow.medication_id == medication_id)
        if start is not None:
            stmt = stmt.where(DosageRow.administration_time >= start)
        if end is not None:
            stmt = stmt.where(DosageRow.administration_time <= end)
        stmt = stmt.order_by(DosageRow.administration_time, DosageRow.id)

        rows = self.session.scalars(stmt).all()
        log.debug("Fetched %d dosages for patient %s", len(rows), patient_id)
        return [
            DosageRecord(
                patient_id=r.patient_id, medication_id=r.medication_id,
                administration_time=r.administration_time, amount=_decimal(r.amount),
                unit=r.unit or "mg", schedule=r.schedule, administered=bool(r.administered),
                notes=r.notes,
            )
            for r in rows
        ]

    def fetch_events(self, patient_id, medication_id=None,
                     start: datetime | None = None, end: datetime | None = None) -> list[MedicalEvent]:
        validate_range(start, end)
        stmt = select(EventRow).where(EventRow.patient_id == patient_id)
        if medication_id is not None:
            stmt = stmt.where(EventRow.medication_id == medication_id)
        if start is not None:
            stmt = stmt.where(EventRow.event_time >= start)
        if end is not None:
            stmt = stmt.where(EventRow.event_time <= end)
        stmt = stmt.order_by(EventRow.event_time, EventRow.id)

        rows = self.session.scalars(stmt).all()
        log.debug("Fetched %d events for patient %s", len(rows), patient_id)
        return [
            MedicalEvent(
                patient_id=r.patient_id, event_time=r.event_time,
                severity=r.severity, category=r.category,
                title=r.title or "", description=r.description or "",
                medication_id=r.medication_id,
                weight_kg=_decimal(r.weight_kg), height_cm=_decimal(r.height_cm),
            )
            for r in rows
        ]

    def fetch_medication(self, medication_id) -> Medication:
        """Unknown ids yield a bare Medication rather than an error."""
        row = self.session.get(MedicationRow, medication_id)
        if row is None:
            return Medication(id=medication_id)
        return Medication(id=row.medication_id, name=row.name, start_date=row.start_date)

    def medication_ids_for_patient(self, patient_id) -> list[str]:
        stmt = (
            select(DosageRow.medication_id)
            .where(DosageRow.patient_id == patient_id)
            .distinct()
            .order_by(DosageRow.medication_id)
        )
        return list(self.session.scalars(stmt).all())
