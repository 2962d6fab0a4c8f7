"""
Load medication, dosage and event records into the database.
- Records are assumed already parsed by the extract step.
- Medications referenced by dosages/events but not supplied get a bare row.
- Re-running a load is a no-op: rows already stored under the same natural key
  (patient, medication, time for dosages; patient, time, category, title for
  events) are skipped.
"""

from __future__ import annotations
import logging
from typing import Sequence
from sqlalchemy.orm import Session
from medtrack_analytics.models import DosageRow, EventRow, MedicationRow
from medtrack_analytics.models.records import DosageRecord, MedicalEvent, Medication

log = logging.getLogger(__name__)

def load_medications(session: Session, medications: Sequence[Medication],
                     referenced: set[str] = frozenset()) -> int:
    known = {m.id for m in medications}
    existing = {row[0] for row in session.query(MedicationRow.medication_id).all()}
    objs = [
        MedicationRow(medication_id=m.id, name=m.name, start_date=m.start_date)
        for m in medications if m.id not in existing
    ]
    objs += [
        MedicationRow(medication_id=med_id)
        for med_id in sorted(referenced - known - existing)
    ]
    session.add_all(objs)
    log.info("Medications: inserted %d", len(objs))
    return len(objs)

def _stored_keys(session: Session, columns, patient_ids: set[str]) -> set[tuple]:
    if not patient_ids:
        return set()
    rows = session.query(*columns).filter(columns[0].in_(sorted(patient_ids))).all()
    return {tuple(row) for row in rows}

def load_dosages(session: Session, dosages: Sequence[DosageRecord]) -> int:
    stored = _stored_keys(
        session,
        (DosageRow.patient_id, DosageRow.medication_id, DosageRow.administration_time),
        {d.patient_id for d in dosages},
    )
    objs = [
        DosageRow(
            patient_id=d.patient_id, medication_id=d.medication_id,
            administration_time=d.administration_time, amount=d.amount, unit=d.unit,
            schedule=d.schedule, administered=d.administered, notes=d.notes,
        )
        for d in dosages
        if (d.patient_id, d.medication_id, d.administration_time) not in stored
    ]
    session.add_all(objs)
    log.info("Dosages: inserted %d, already stored %d", len(objs), len(dosages) - len(objs))
    return len(objs)

def load_events(session: Session, events: Sequence[MedicalEvent]) -> int:
    stored = _stored_keys(
        session,
        (EventRow.patient_id, EventRow.event_time, EventRow.category, EventRow.title),
        {e.patient_id for e in events},
    )
    objs = [
        EventRow(
            patient_id=e.patient_id, medication_id=e.medication_id, event_time=e.event_time,
            title=e.title, description=e.description, severity=e.severity, category=e.category,
            weight_kg=e.weight_kg, height_cm=e.height_cm,
        )
        for e in events
        if (e.patient_id, e.event_time, e.category, e.title) not in stored
    ]
    session.add_all(objs)
    log.info("Events: inserted %d, already stored %d", len(objs), len(events) - len(objs))
    return len(objs)

def load_records(session: Session, medications: Sequence[Medication],
                 dosages: Sequence[DosageRecord], events: Sequence[MedicalEvent]) -> dict:
    referenced = {d.medication_id for d in dosages} | {e.medication_id for e in events if e.medication_id}
    try:
        m_count = load_medications(session, medications, referenced)
        session.flush()
        d_count = load_dosages(session, dosages)
        e_count = load_events(session, events)
        session.commit()
        log.info("Load committed successfully")
    except Exception as e:
        session.rollback()
        log.error("Load failed; rolled back: %s", e, exc_info=True)
        raise

    log.info("Load summary: medications=%d, dosages=%d, events=%d", m_count, d_count, e_count)
    return {"medications": m_count, "dosages": d_count, "events": e_count}
