"""
Analytics service - fetches a patient's records and runs the analyzers
"""
from __future__ import annotations
import logging
from datetime import datetime
from medtrack_analytics.analytics import (
    analyze_all_correlations, analyze_correlation, analyze_impact,
    build_timeline_analysis, summarize, validate_range, weekly_summaries,
)
from medtrack_analytics.models.results import (
    CorrelationResult, DashboardSummary, ImpactAnalysis, TimelineAnalysis
)

log = logging.getLogger(__name__)

class AnalyticsService:
    """Thin orchestration over a repository exposing fetch_dosages/fetch_events.

    Patient and medication ids are assumed to be authorised upstream; an id
    with no records simply produces a zero-valued result.
    """

    def __init__(self, repository):
        self.repository = repository

    def correlation(self, patient_id, medication_id, start: datetime | None = None,
                    end: datetime | None = None) -> CorrelationResult:
        validate_range(start, end)
        try:
            medication = self.repository.fetch_medication(medication_id)
            dosages = self.repository.fetch_dosages(patient_id, medication_id, start, end)
            events = self.repository.fetch_events(patient_id)
            return analyze_correlation(medication, dosages, events, patient_id=patient_id)
        except Exception as e:
            log.error("Correlation analysis failed for %s/%s: %s", patient_id, medication_id, e, exc_info=True)
            raise

    def all_correlations(self, patient_id, max_workers: int | None = None) -> list[CorrelationResult]:
        try:
            med_ids = self.repository.medication_ids_for_patient(patient_id)
            medications = [self.repository.fetch_medication(m) for m in med_ids]
            dosages = self.repository.fetch_dosages(patient_id)
            events = self.repository.fetch_events(patient_id)
            log.info("Correlating %d medications for patient %s", len(medications), patient_id)
            return analyze_all_correlations(
                medications, dosages, events, patient_id=patient_id, max_workers=max_workers
            )
        except Exception as e:
            log.error("Correlation batch failed for %s: %s", patient_id, e, exc_info=True)
            raise

    def dashboard(self, patient_id, as_of: datetime | None = None) -> DashboardSummary:
        as_of = as_of or datetime.now()
        events = self.repository.fetch_events(patient_id)
        dosages = self.repository.fetch_dosages(patient_id)
        return summarize(events, dosages, as_of, patient_id=patient_id)

    def weekly_summaries(self, patient_id, as_of: datetime | None = None) -> dict[str, DashboardSummary]:
        as_of = as_of or datetime.now()
        events = self.repository.fetch_events(patient_id)
        dosages = self.repository.fetch_dosages(patient_id)
        return weekly_summaries(events, dosages, as_of, patient_id=patient_id)

    def timeline(self, patient_id, start: datetime, end: datetime,
                 medication_id=None) -> TimelineAnalysis:
        validate_range(start, end)
        dosages = self.repository.fetch_dosages(patient_id, medication_id, start, end)
        events = self.repository.fetch_events(patient_id, medication_id, start, end)
        return build_timeline_analysis(patient_id, dosages, events, start, end)

    def impact(self, patient_id, medication_id, start: datetime, end: datetime) -> ImpactAnalysis:
        validate_range(start, end)
        try:
            medication = self.repository.fetch_medication(medication_id)
            dosages = self.repository.fetch_dosages(patient_id, medication_id, start, end)
            events = self.repository.fetch_events(patient_id)
            result = analyze_impact(medication, patient_id, dosages, events, start, end)
            log.info("Impact %s for %s: score=%.3f (%s)", medication_id, patient_id,
                     result.effectiveness_score, result.effectiveness_category)
            return result
        except Exception as e:
            log.error("Impact analysis failed for %s/%s: %s", patient_id, medication_id, e, exc_info=True)
            raise
