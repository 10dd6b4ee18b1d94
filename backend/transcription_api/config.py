"""Application-wide configuration loader.

Parses environment variables and exposes a singleton ``settings`` object that
other modules import.
"""

import os
from typing import Dict, List


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _levels(value: str) -> Dict[str, str]:
    """Parse ``"downloader=DEBUG,store=WARNING"`` into ``{component: LEVEL}``."""
    levels = {}
    for item in value.split(","):
        name, sep, level = item.partition("=")
        if sep and name.strip() and level.strip():
            levels[name.strip().lower()] = level.strip().upper()
    return levels


class Settings:
    """Settings helper that gracefully falls back to sane defaults.

    An environment variable that is set but empty (``DATABASE_URL=""``) would
    otherwise override the in-code default and make SQLAlchemy fail to parse
    the URL at start-up, so every setting uses the idiom

        os.getenv(KEY) or DEFAULT

    which replaces *falsy* values with the specified DEFAULT.
    """

    DATABASE_URL: str = os.getenv('DATABASE_URL') or 'sqlite:///./transcriptions.db'
    DB_ECHO: bool = _flag(os.getenv('DB_ECHO') or '0')

    HOST: str = os.getenv('HOST') or '0.0.0.0'
    PORT: int = int(os.getenv('PORT') or '3000')

    LOG_DIR: str = os.getenv('LOG_DIR') or 'logs'
    LOG_LEVEL: str = (os.getenv('LOG_LEVEL') or 'INFO').upper()
    # Per-component overrides, e.g. LOG_LEVELS="downloader=DEBUG,store=WARNING".
    LOG_LEVELS: Dict[str, str] = _levels(os.getenv('LOG_LEVELS') or '')

    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in (os.getenv('CORS_ORIGINS') or '*').split(',') if origin.strip()
    ]

    # Mock downloader: one HEAD request plus DOWNLOAD_MAX_RETRIES retries, fixed delay.
    DOWNLOAD_MAX_RETRIES: int = int(os.getenv('DOWNLOAD_MAX_RETRIES') or '3')
    DOWNLOAD_RETRY_DELAY_SECONDS: float = float(os.getenv('DOWNLOAD_RETRY_DELAY_SECONDS') or '1.0')
    DOWNLOAD_TIMEOUT_SECONDS: float = float(os.getenv('DOWNLOAD_TIMEOUT_SECONDS') or '5.0')
    DOWNLOAD_FAILURE_FATAL: bool = _flag(os.getenv('DOWNLOAD_FAILURE_FATAL') or '0')


settings = Settings()
