import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional

from transcription_api.config import settings

# Define log directory and file
LOG_DIR = settings.LOG_DIR
LOG_FILE = os.path.join(LOG_DIR, "app.log")

# Short names accepted by LOG_LEVELS; any other key is used as a logger name.
COMPONENT_LOGGERS = {
    "api": "transcription_api.api",
    "db": "transcription_api.db",
    "downloader": "transcription_api.services.downloader",
    "pipeline": "transcription_api.services.pipeline",
    "retry": "transcription_api.utils.retry",
    "store": "transcription_api.services.store",
    "transcriber": "transcription_api.services.transcriber",
    "sqlalchemy": "sqlalchemy.engine",
    "httpx": "httpx",
}


def apply_component_levels(levels: Dict[str, str]) -> None:
    """Set per-component levels, e.g. ``{"downloader": "DEBUG"}``.

    Unknown level names are logged and skipped so a typo in the environment
    does not stop the service from starting.
    """
    for component, level in levels.items():
        logger_name = COMPONENT_LOGGERS.get(component, component)
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            logging.warning("Ignoring unknown log level %r for %s", level, component)
            continue
        logging.getLogger(logger_name).setLevel(resolved)


def setup_logging(levels: Optional[Dict[str, str]] = None):
    """
    Configures logging for the transcription service.
    Outputs to console and a rotating file with a detailed format, then
    applies the per-component overrides from ``LOG_LEVELS``.
    """
    os.makedirs(LOG_DIR, exist_ok=True)

    log_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)

    # Avoid adding handlers multiple times when called again (tests, reloads)
    if not any(isinstance(h, logging.FileHandler) for h in root_logger.handlers):
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=1024*1024*5, backupCount=2)  # 5MB per file, 2 backups
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
    if not any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout
        for h in root_logger.handlers
    ):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(log_formatter)
        root_logger.addHandler(console_handler)

    logging.getLogger("transcription_api").setLevel(settings.LOG_LEVEL)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    apply_component_levels(settings.LOG_LEVELS if levels is None else levels)

    logging.info(
        "Logging configured (level %s, file %s, overrides %s)",
        settings.LOG_LEVEL, LOG_FILE, settings.LOG_LEVELS if levels is None else levels,
    )
