"""
CLI wrapper for the analytics engine.
Loads the raw CSVs into the database, runs one analysis and prints JSON.
Reloading the same CSVs against a persistent database does not duplicate rows.
Run with:
    python -m medtrack_analytics.scripts.run_analytics dashboard --patient P-0001
    python -m medtrack_analytics.scripts.run_analytics impact --patient P-0001 --medication M-01 \
        --start 2024-01-01 --end 2024-02-01
"""
import argparse
import json
import logging
import os
from datetime import datetime
from sqlalchemy.orm import Session
from medtrack_analytics.core.config import DOSAGES_FILE, EVENTS_FILE, MEDICATIONS_FILE
from medtrack_analytics.core.db import create_tables, get_engine
from medtrack_analytics.core.logging_setup import setup_logging
from medtrack_analytics.extract.extract_records import read_dosages, read_events, read_medications
from medtrack_analytics.load.load_to_db import load_records
from medtrack_analytics.services.analytics import AnalyticsService
from medtrack_analytics.services.repository import RecordRepository

log = logging.getLogger(__name__)

ANALYSES = ("dashboard", "weekly", "timeline", "correlation", "correlations", "impact")

def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Medication/event analytics")
    p.add_argument("analysis", choices=ANALYSES)
    p.add_argument("--patient", required=True)
    p.add_argument("--medication")
    p.add_argument("--start", type=datetime.fromisoformat)
    p.add_argument("--end", type=datetime.fromisoformat)
    p.add_argument("--as-of", type=datetime.fromisoformat)
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--medications-csv", default=str(MEDICATIONS_FILE))
    p.add_argument("--dosages-csv", default=str(DOSAGES_FILE))
    p.add_argument("--events-csv", default=str(EVENTS_FILE))
    p.add_argument("--db-url", default=os.getenv("DATABASE_URL", "sqlite://"))
    p.add_argument("--skip-load", action="store_true", help="query existing rows only")
    p.add_argument("--log-level", choices=("DEBUG", "INFO", "WARNING", "ERROR"), type=str.upper,
                   help="defaults to LOG_LEVEL from the environment")
    return p.parse_args(argv)

def run(args, session: Session) -> object:
    service = AnalyticsService(RecordRepository(session))
    if args.analysis in ("correlation", "impact") and not args.medication:
        raise SystemExit(f"--medication is required for {args.analysis}")
    if args.analysis in ("timeline", "impact") and (args.start is None or args.end is None):
        raise SystemExit(f"--start and --end are required for {args.analysis}")

    if args.analysis == "dashboard":
        return service.dashboard(args.patient, args.as_of).to_dict()
    if args.analysis == "weekly":
        return {k: v.to_dict() for k, v in service.weekly_summaries(args.patient, args.as_of).items()}
    if args.analysis == "timeline":
        return service.timeline(args.patient, args.start, args.end, args.medication).to_dict()
    if args.analysis == "correlation":
        return service.correlation(args.patient, args.medication, args.start, args.end).to_dict()
    if args.analysis == "correlations":
        return [r.to_dict() for r in service.all_correlations(args.patient, args.workers)]
    return service.impact(args.patient, args.medication, args.start, args.end).to_dict()

def main(argv=None):
    args = _parse_args(argv)
    setup_logging(args.log_level)
    log.info("Starting %s analysis for %s", args.analysis, args.patient)

    engine = create_tables(get_engine(args.db_url))
    with Session(engine) as session:
        if not args.skip_load and os.path.exists(args.dosages_csv) and os.path.exists(args.events_csv):
            medications = read_medications(args.medications_csv) if os.path.exists(args.medications_csv) else []
            load_records(session, medications, read_dosages(args.dosages_csv), read_events(args.events_csv))
        result = run(args, session)

    print(json.dumps(result, indent=2))

if __name__ == "__main__":
    main()
