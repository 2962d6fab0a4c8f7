"""
Extract medications, dosages and medical events from CSV into records.
- Normalises enum names (case, spaces, dashes)
- Parses timestamps and amounts
- Drops rows that cannot be parsed, with a warning
"""

from __future__ import annotations
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
import pandas as pd
from medtrack_analytics.core.config import DOSAGES_FILE, EVENTS_FILE, MEDICATIONS_FILE
from medtrack_analytics.models.records import (
    DosageRecord, DosageSchedule, EventCategory, EventSeverity, MedicalEvent, Medication
)

log = logging.getLogger(__name__)

TRUE_TOKENS = {"true", "1", "yes", "y"}

def _clean(x) -> str | None:
    if x is None or pd.isna(x):
        return None
    s = str(x).strip()
    return s or None

def _enum(enum_cls, x):
    s = _clean(x)
    if s is None:
        return None
    key = s.upper().replace(" ", "_").replace("-", "_")
    try:
        return enum_cls(key)
    except ValueError:
        return None

def _decimal(x) -> Decimal | None:
    s = _clean(x)
    if s is None:
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None

def _read(path: str | Path, time_cols: list[str]) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip()
    for col in time_cols:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col].str.strip(), format="ISO8601", errors="coerce")
    log.info("Extracted %s (%d rows)", path, len(df))
    return df

def read_medications(path: str | Path = MEDICATIONS_FILE) -> list[Medication]:
    df = _read(path, ["start_date"])
    out = []
    for rec in df.to_dict("records"):
        med_id = _clean(rec.get("medication_id"))
        if med_id is None:
            log.warning("Skipping medication row without id: %s", rec)
            continue
        start = rec.get("start_date")
        out.append(Medication(
            id=med_id,
            name=_clean(rec.get("name")),
            start_date=None if pd.isna(start) else start.to_pydatetime(),
        ))
    return out

def read_dosages(path: str | Path = DOSAGES_FILE) -> list[DosageRecord]:
    df = _read(path, ["administration_time"])
    out, dropped = [], 0
    for rec in df.to_dict("records"):
        ts = rec.get("administration_time")
        amount = _decimal(rec.get("amount"))
        patient_id = _clean(rec.get("patient_id"))
        medication_id = _clean(rec.get("medication_id"))
        if pd.isna(ts) or amount is None or patient_id is None or medication_id is None:
            dropped += 1
            continue
        out.append(DosageRecord(
            patient_id=patient_id,
            medication_id=medication_id,
            administration_time=ts.to_pydatetime(),
            amount=amount,
            unit=_clean(rec.get("unit")) or "mg",
            schedule=_enum(DosageSchedule, rec.get("schedule")) or DosageSchedule.CUSTOM,
            administered=(_clean(rec.get("administered")) or "").lower() in TRUE_TOKENS,
            notes=_clean(rec.get("notes")),
        ))
    if dropped:
        log.warning("Dropped %d unparseable dosage rows from %s", dropped, path)
    log.info("Dosages: %d records", len(out))
    return out

def read_events(path: str | Path = EVENTS_FILE) -> list[MedicalEvent]:
    df = _read(path, ["event_time"])
    out, dropped = [], 0
    for rec in df.to_dict("records"):
        ts = rec.get("event_time")
        severity = _enum(EventSeverity, rec.get("severity"))
        category = _enum(EventCategory, rec.get("category"))
        patient_id = _clean(rec.get("patient_id"))
        if pd.isna(ts) or severity is None or category is None or patient_id is None:
            dropped += 1
            continue
        out.append(MedicalEvent(
            patient_id=patient_id,
            event_time=ts.to_pydatetime(),
            severity=severity,
            category=category,
            title=_clean(rec.get("title")) or "",
            description=_clean(rec.get("description")) or "",
            medication_id=_clean(rec.get("medication_id")),
            weight_kg=_decimal(rec.get("weight_kg")),
            height_cm=_decimal(rec.get("height_cm")),
        ))
    if dropped:
        log.warning("Dropped %d unparseable event rows from %s", dropped, path)
    log.info("Events: %d records", len(out))
    return out
