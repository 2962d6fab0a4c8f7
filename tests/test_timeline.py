"""
Tests for the merged dosage/event timeline
"""
from datetime import timedelta
from decimal import Decimal
import pytest
from medtrack_analytics.analytics.timeline import build_timeline, build_timeline_analysis
from medtrack_analytics.core.errors import InvalidRangeError
from medtrack_analytics.models.records import EventSeverity
from conftest import PATIENT, T0, dose, event, hours


def test_points_sorted_ascending():
    dosages = [dose(T0 + hours(5)), dose(T0)]
    events = [event(T0 + hours(3)), event(T0 + hours(1))]
    points = build_timeline(dosages, events)
    assert [p.timestamp for p in points] == [T0, T0 + hours(1), T0 + hours(3), T0 + hours(5)]
    assert [p.kind for p in points] == ["DOSAGE", "EVENT", "EVENT", "DOSAGE"]


def test_dosage_before_event_on_tie():
    points = build_timeline([dose(T0)], [event(T0)])
    assert [p.kind for p in points] == ["DOSAGE", "EVENT"]
    points = build_timeline([dose(T0), dose(T0 + hours(1))], [event(T0 + hours(1)), event(T0)])
    assert [p.kind for p in points] == ["DOSAGE", "EVENT", "DOSAGE", "EVENT"]


def test_point_contents():
    points = build_timeline(
        [dose(T0, amount="2.5")],
        [event(T0 + hours(1), severity=EventSeverity.SEVERE, title="Seizure", description="tonic-clonic")],
    )
    d, e = points
    assert d.value == Decimal("2.5")
    assert d.unit == "mg"
    assert d.severity is None
    assert d.formatted_value == "2.5 mg"
    assert e.value is None and e.unit is None
    assert e.severity == EventSeverity.SEVERE
    assert e.description == "Seizure: tonic-clonic"
    assert e.is_high_severity


def test_build_is_deterministic():
    dosages = [dose(T0 + hours(h % 3)) for h in range(6)]
    events = [event(T0 + hours(h % 2), title=f"e{h}") for h in range(6)]
    first = build_timeline(dosages, events)
    second = build_timeline(dosages, events)
    assert first == second
    assert [p.to_dict() for p in first] == [p.to_dict() for p in second]


def test_empty_timeline():
    assert build_timeline([], []) == []
    analysis = build_timeline_analysis(PATIENT, [], [], T0, T0 + timedelta(days=1))
    assert not analysis.has_data
    assert analysis.statistics() == {"total_data_points": 0, "medical_events": 0, "medication_dosages": 0}
    assert analysis.patterns() == []


def test_analysis_accessors():
    dosages = [dose(T0), dose(T0 + hours(12))]
    events = [event(T0 + hours(1), severity=EventSeverity.CRITICAL),
              event(T0 + hours(2), severity=EventSeverity.MILD),
              event(T0 + timedelta(days=5))]
    analysis = build_timeline_analysis(PATIENT, dosages, events, T0, T0 + timedelta(days=2, hours=1))
    assert analysis.total_dosages == 2
    assert analysis.total_events == 2
    assert len(analysis.high_severity_events) == 1
    assert analysis.period_days == 3
    assert analysis.statistics()["time_span_days"] == 0


def test_period_days_whole_days():
    analysis = build_timeline_analysis(PATIENT, [], [], T0, T0 + timedelta(days=7))
    assert analysis.period_days == 7


def test_analysis_filters_other_patients():
    analysis = build_timeline_analysis(PATIENT, [dose(T0, patient_id="P-0002")], [event(T0)], T0, T0 + hours(1))
    assert analysis.total_dosages == 0
    assert analysis.total_events == 1


def test_analysis_rejects_inverted_range():
    with pytest.raises(InvalidRangeError):
        build_timeline_analysis(PATIENT, [], [], T0 + hours(1), T0)


def test_patterns():
    events = [event(T0 + hours(h)) for h in range(12)]
    analysis = build_timeline_analysis(PATIENT, [dose(T0)], events, T0, T0 + timedelta(days=1))
    assert analysis.patterns() == [
        "High event frequency relative to medication dosages",
        "Dense activity period with multiple data points",
    ]


def test_event_bmi_carried_on_point():
    e = event(T0, weight_kg=Decimal("70"), height_cm=Decimal("175"))
    (point,) = build_timeline([], [e])
    assert point.bmi == Decimal("22.9")
    assert event(T0, weight_kg=Decimal("70"), height_cm=Decimal("20")).bmi is None
