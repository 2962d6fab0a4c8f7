from medtrack_analytics.models.records import (
    DosageRecord, DosageSchedule, EventCategory, EventSeverity, MedicalEvent, Medication
)
from medtrack_analytics.models.results import (
    CorrelationResult, DashboardSummary, ImpactAnalysis, TimelineAnalysis, TimelinePoint,
    WeeklyTrendBucket,
)
from medtrack_analytics.models.tables import Base, DosageRow, EventRow, MedicationRow
