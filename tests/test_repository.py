"""
Tests for loading records and fetching them back through the repository
"""
from datetime import timedelta
from decimal import Decimal
import pytest
from medtrack_analytics.core.errors import InvalidRangeError
from medtrack_analytics.load.load_to_db import load_records
from medtrack_analytics.models import MedicationRow
from medtrack_analytics.models.records import EventCategory, EventSeverity, Medication
from medtrack_analytics.services.repository import RecordRepository
from conftest import MED, PATIENT, T0, dose, event, hours


@pytest.fixture
def repo(session, medication):
    dosages = [dose(T0), dose(T0 + hours(12), amount="7.5"), dose(T0, medication_id="M-0002"),
               dose(T0, patient_id="P-0002")]
    events = [event(T0 + hours(2), EventCategory.ADVERSE_REACTION, EventSeverity.SEVERE, medication_id=MED),
              event(T0 + timedelta(days=3)),
              event(T0, patient_id="P-0002")]
    load_records(session, [medication], dosages, events)
    return RecordRepository(session)


def test_load_creates_referenced_medications(session, repo):
    ids = sorted(r.medication_id for r in session.query(MedicationRow).all())
    assert ids == [MED, "M-0002"]


def test_reload_skips_stored_rows(session, repo, medication):
    """Loading the same records again inserts nothing new."""
    counts = load_records(session, [medication], [dose(T0), dose(T0 + hours(24))], [event(T0 + timedelta(days=3))])
    assert counts == {"medications": 0, "dosages": 1, "events": 0}
    assert len(repo.fetch_dosages(PATIENT, MED)) == 3
    assert len(repo.fetch_events(PATIENT)) == 2

def test_fetch_dosages_filters(repo):
    assert len(repo.fetch_dosages(PATIENT)) == 3
    own = repo.fetch_dosages(PATIENT, MED)
    assert [d.administration_time for d in own] == [T0, T0 + hours(12)]
    assert own[1].amount == Decimal("7.5")
    assert len(repo.fetch_dosages(PATIENT, MED, start=T0 + hours(1))) == 1


def test_fetch_events_filters(repo):
    events = repo.fetch_events(PATIENT)
    assert len(events) == 2
    assert events[0].category == EventCategory.ADVERSE_REACTION
    assert events[0].severity == EventSeverity.SEVERE
    assert len(repo.fetch_events(PATIENT, MED)) == 1
    assert len(repo.fetch_events(PATIENT, end=T0 + timedelta(days=1))) == 1


def test_fetch_rejects_inverted_range(repo):
    with pytest.raises(InvalidRangeError):
        repo.fetch_events(PATIENT, start=T0 + hours(1), end=T0)


def test_unknown_ids_return_empty(repo):
    assert repo.fetch_dosages("nobody") == []
    assert repo.fetch_events("nobody") == []
    assert repo.fetch_medication("missing") == Medication(id="missing")


def test_fetch_medication_and_ids(repo):
    med = repo.fetch_medication(MED)
    assert med.name == "Levetiracetam"
    assert med.start_date == T0
    assert repo.medication_ids_for_patient(PATIENT) == [MED, "M-0002"]
