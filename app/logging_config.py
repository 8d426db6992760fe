# =============================================================================
# app/logging_config.py - Logging Setup
# =============================================================================
# Configures the root logger once at startup:
# - Console output for every level above the configured threshold
# - When LOG_DIR is set: combined.log (all records) and error.log (ERROR+),
#   each rotated at 5MB with 5 backups
#
# Modules log through logging.getLogger(__name__) and never configure
# handlers themselves.
# =============================================================================

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def configure_logging(settings: Settings) -> None:
    """Install console (and optional file) handlers on the root logger."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(
            log_dir / "combined.log",
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        errors = RotatingFileHandler(
            log_dir / "error.log",
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        errors.setLevel(logging.ERROR)
        handlers.extend([combined, errors])

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    # httpx logs every request at INFO; keep it for debugging only
    logging.getLogger("httpx").setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)
