
from datetime import timedelta
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

# project paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
DATA_DIR = BASE_DIR / "data"
RAW_DIR  = DATA_DIR / "raw"
LOGS_DIR = DATA_DIR / "logs"

# input files
MEDICATIONS_FILE = RAW_DIR / "medications.csv"
DOSAGES_FILE     = RAW_DIR / "dosages.csv"
EVENTS_FILE      = RAW_DIR / "events.csv"

# analytics constants (fixed, not environment driven)
EVENT_LOOKAHEAD       = timedelta(hours=24)
NORMALIZATION_DAYS    = 30.0
RECENT_WINDOW         = timedelta(days=7)
RECENT_ACTIVITY_RATIO = 0.30
CONFIDENCE_SAMPLE     = 10
TREND_BUCKET          = timedelta(days=7)
WEEKLY_SUMMARY_WEEKS  = 8

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE  = os.getenv("LOG_FILE", "analytics.log")

# Database
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5433")
DB_NAME = os.getenv("DB_NAME")


def database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if not all([DB_USER, DB_PASSWORD, DB_NAME]):
        raise ValueError("Missing required DB environment variables")
    return f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
