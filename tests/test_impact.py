"""
Tests for medication impact analysis
"""
from datetime import timedelta
import pytest
from medtrack_analytics.analytics.impact import analyze_impact, effectiveness_score, symptom_reduction
from medtrack_analytics.core.errors import InvalidRangeError
from medtrack_analytics.models.records import EventCategory, Medication
from conftest import MED, PATIENT, T0, dose, event, hours

DAY = timedelta(days=1)


def test_symptom_reduction_halves_rate(medication):
    start, end = T0, T0 + 4 * DAY
    events = [event(T0 + hours(1)), event(T0 + hours(25)), event(T0 + hours(50))]
    result = analyze_impact(medication, PATIENT, [dose(T0)], events, start, end)

    assert result.symptom_reduction_percentage == pytest.approx(50.0)
    assert result.total_dosages == 1
    assert result.events_within_24_hours == 1
    assert result.event_rate_percentage == 100.0
    assert result.symptom_events == 1
    assert result.adverse_reaction_events == 0
    assert result.effectiveness_score == pytest.approx(0.85)
    assert result.effectiveness_category == "EXCELLENT"
    assert result.shows_good_symptom_control


def test_symptom_reduction_counts_only_symptoms():
    events = [event(T0 + hours(1)), event(T0 + hours(30), EventCategory.TEST)]
    assert symptom_reduction(events, T0, T0 + 2 * DAY) == pytest.approx(100.0)


def test_symptom_reduction_clamped():
    events = [event(T0 + hours(1))] + [event(T0 + hours(30))] * 5
    assert symptom_reduction(events, T0, T0 + 2 * DAY) == -100.0


def test_symptom_reduction_zero_without_first_half_symptoms():
    assert symptom_reduction([event(T0 + hours(30))], T0, T0 + 2 * DAY) == 0.0
    assert symptom_reduction([event(T0)], T0, T0) == 0.0


def test_effectiveness_weights():
    assert effectiveness_score(0.0, 0, 0) == pytest.approx(0.7)
    assert effectiveness_score(100.0, 0, 4) == pytest.approx(1.0)
    assert effectiveness_score(-100.0, 4, 4) == pytest.approx(0.0)
    assert effectiveness_score(0.0, 1, 2) == pytest.approx(0.5)


def test_adverse_reactions_reduce_score(medication):
    start, end = T0, T0 + 2 * DAY
    dosages = [dose(T0), dose(T0 + DAY)]
    events = [event(T0 + hours(1), EventCategory.ADVERSE_REACTION),
              event(T0 + hours(2), EventCategory.SYMPTOM),
              event(T0 + hours(26), EventCategory.OBSERVATION)]
    result = analyze_impact(medication, PATIENT, dosages, events, start, end)
    assert result.events_within_24_hours == 3
    assert result.adverse_reaction_events == 1
    assert result.symptom_events == 1
    assert result.adverse_reaction_rate == pytest.approx(100 / 3)
    assert result.has_concerning_side_effects
    # one symptom in the first half, none in the second
    assert result.symptom_reduction_percentage == 100.0
    assert result.effectiveness_score == pytest.approx(0.6 + 0.4 * (2 / 3))


def test_no_dosages_gives_zero_result(medication):
    result = analyze_impact(medication, PATIENT, [], [], T0, T0 + 14 * DAY)
    assert result.total_dosages == 0
    assert result.events_within_24_hours == 0
    assert result.event_rate_percentage == 0.0
    assert result.symptom_reduction_percentage == 0.0
    assert result.effectiveness_score == 0.0
    assert result.effectiveness_category == "INEFFECTIVE"
    assert [b.event_count for b in result.weekly_trends] == [0, 0]


def test_single_record_inputs(medication):
    result = analyze_impact(medication, PATIENT, [dose(T0)], [], T0, T0 + DAY)
    assert result.events_within_24_hours == 0
    assert result.adverse_reaction_rate == 0.0
    assert len(result.weekly_trends) == 1


def test_inverted_window_rejected(medication):
    with pytest.raises(InvalidRangeError):
        analyze_impact(medication, PATIENT, [], [], T0 + DAY, T0)


def test_weekly_trends_split_on_start_date():
    medication = Medication(id=MED, name="Levetiracetam", start_date=T0)
    start, end = T0 - 14 * DAY, T0 + 7 * DAY
    dosages = [dose(T0 - 10 * DAY), dose(T0 + 2 * DAY)]
    events = [event(T0 - 10 * DAY + hours(1)), event(T0 + 2 * DAY + hours(1)),
              event(T0 + 2 * DAY + hours(3))]
    result = analyze_impact(medication, PATIENT, dosages, events, start, end)

    assert [b.phase for b in result.weekly_trends] == [
        "before_medication", "before_medication", "after_medication"
    ]
    assert [b.event_count for b in result.weekly_trends] == [1, 0, 2]
    assert result.trends_by_phase() == {"before_medication": [1, 0], "after_medication": [2]}
    assert result.weekly_trends[-1].week_end == end


def test_partial_last_bucket():
    medication = Medication(id=MED)
    start, end = T0, T0 + 10 * DAY
    result = analyze_impact(medication, PATIENT, [dose(T0 + 9 * DAY)], [event(T0 + 9 * DAY + hours(2))],
                            start, end)
    assert len(result.weekly_trends) == 2
    assert result.weekly_trends[1].week_start == T0 + 7 * DAY
    assert result.weekly_trends[1].event_count == 1
    # no start date: anchored on the first dosage
    assert result.weekly_trends[0].phase == "before_medication"


def test_period_helpers(medication):
    result = analyze_impact(medication, PATIENT, [dose(T0 + DAY * i) for i in range(10)], [], T0, T0 + 10 * DAY)
    assert result.period_days == 10
    assert result.average_dosages_per_day == pytest.approx(1.0)
    data = result.to_dict()
    assert data["weekly_trends"][0]["phase"] == "after_medication"
