"""Domain exceptions and the HTTP status each one maps to.

Routes never build error responses themselves: they raise one of these and
the exception handler registered in :mod:`transcription_api.main` renders the
``{"success": false, "error": ...}`` envelope.
"""

from __future__ import annotations


class AppBaseException(Exception):
    """Domain-level base exception so we can map to JSON responses easily."""

    status_code: int = 500

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppBaseException):
    """Malformed audio URL or record id."""

    status_code = 400


class NotFoundError(AppBaseException):
    """Delete/lookup target does not exist."""

    status_code = 404


class PersistenceError(AppBaseException):
    """The record store is unavailable or failed internally."""

    status_code = 500


class DownloadError(AppBaseException):
    """Audio URL stayed unreachable after all retries (only raised in fatal mode)."""

    status_code = 502
