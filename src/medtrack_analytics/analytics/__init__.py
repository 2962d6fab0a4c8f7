from medtrack_analytics.analytics.time_window import select, validate_range
from medtrack_analytics.analytics.correlation import (
    analyze_all_correlations, analyze_correlation, credit_events, correlation_strength
)
from medtrack_analytics.analytics.timeline import build_timeline, build_timeline_analysis
from medtrack_analytics.analytics.dashboard import summarize, weekly_summaries
from medtrack_analytics.analytics.impact import analyze_impact
