"""
Root logger configuration shared by the CLI and library entry points.
"""
import logging
import logging.handlers
from pathlib import Path
from medtrack_analytics.core.config import LOG_FILE, LOG_LEVEL, LOGS_DIR

DEFAULT_FMT = "%(asctime)s - %(levelname)-5s - %(name)s - %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"
QUIET_LOGGERS = ("sqlalchemy.engine",)

def setup_logging(level: str | None = None, file_name: str = LOG_FILE, log_dir: str | Path | None = None) -> None:
    """Attach console and rotating-file handlers to the root logger once.

    The level defaults to LOG_LEVEL. A later call that names a level only
    changes the root level; handlers are never added twice.
    """
    root = logging.getLogger()
    configured = getattr(setup_logging, "_configured", False)
    if level is not None or not configured:
        root.setLevel((level or LOG_LEVEL).upper())
    if configured:
        return

    directory = Path(log_dir or LOGS_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(DEFAULT_FMT, datefmt=DATE_FMT)
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            directory / file_name, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # SQL statement logging stays off even at DEBUG
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    setup_logging._configured = True
