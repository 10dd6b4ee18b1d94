"""CRUD operations over the ``transcriptions`` table."""

from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..db.database import Database
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..models.transcription import Transcription, TranscriptionRecord

logger = logging.getLogger(__name__)

ID_LENGTH = 24
_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{%d}$" % ID_LENGTH)

# Fresh ids are random, so a collision is astronomically unlikely; retry a
# couple of times rather than looping forever if the table says otherwise.
_MAX_ID_COLLISIONS = 3


def _as_utc(value: datetime) -> datetime:
    """Convert to UTC; naive values are taken to already be UTC.

    Only the UTC wall-clock time survives a round trip through SQLite.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_record_id() -> str:
    return secrets.token_hex(ID_LENGTH // 2)


def is_valid_record_id(record_id: object) -> bool:
    return isinstance(record_id, str) and bool(_ID_PATTERN.match(record_id))


def normalize_record_id(record_id: object) -> str:
    """Return ``record_id`` lower-cased, or raise :class:`ValidationError`."""
    if not is_valid_record_id(record_id):
        raise ValidationError("Invalid transcription ID")
    return record_id.lower()


class TranscriptionStore:
    """Create / list / delete transcription records.

    Every call opens its own session on the injected :class:`Database`, so
    concurrent requests only share what the database itself serialises.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def create(
        self,
        audio_url: str,
        transcription_text: str,
        created_at: Optional[datetime] = None,
    ) -> TranscriptionRecord:
        created_at = _as_utc(created_at or datetime.now(timezone.utc))
        for _ in range(_MAX_ID_COLLISIONS):
            row = Transcription(
                id=new_record_id(),
                audio_url=audio_url,
                transcription_text=transcription_text,
                created_at=created_at,
            )
            try:
                with self.database.session() as db:
                    try:
                        db.add(row)
                        db.commit()
                    except (SQLAlchemyError, UnicodeEncodeError):
                        db.rollback()
                        raise
                    record = row.to_record()
            except IntegrityError as exc:
                logger.warning("Record id collision on %s, generating a new id: %s", row.id, exc)
                continue
            except (SQLAlchemyError, UnicodeEncodeError) as exc:
                # The sqlite3 driver raises UnicodeEncodeError for lone surrogates.
                logger.error("Failed to save transcription for %s: %s", audio_url, exc, exc_info=True)
                raise PersistenceError("Failed to save transcription") from exc
            logger.info("Saved transcription %s for %s", record.id, audio_url)
            return record
        raise PersistenceError("Could not allocate a unique transcription ID")

    def list_all(self) -> List[TranscriptionRecord]:
        """Return every record, newest first (ties: latest insert first)."""
        try:
            with self.database.session() as db:
                rows = (
                    db.query(Transcription)
                    .order_by(Transcription.created_at.desc(), Transcription.seq.desc())
                    .all()
                )
                return [row.to_record() for row in rows]
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch transcriptions: %s", exc, exc_info=True)
            raise PersistenceError("Failed to fetch transcriptions") from exc

    def get_by_id(self, record_id: str) -> TranscriptionRecord:
        record_id = normalize_record_id(record_id)
        try:
            with self.database.session() as db:
                row = db.query(Transcription).filter(Transcription.id == record_id).first()
                if row is None:
                    raise NotFoundError("Transcription not found")
                return row.to_record()
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch transcription %s: %s", record_id, exc, exc_info=True)
            raise PersistenceError("Failed to fetch transcription") from exc

    def delete_by_id(self, record_id: str) -> bool:
        record_id = normalize_record_id(record_id)
        try:
            with self.database.session() as db:
                try:
                    deleted = (
                        db.query(Transcription)
                        .filter(Transcription.id == record_id)
                        .delete(synchronize_session=False)
                    )
                    db.commit()
                except SQLAlchemyError:
                    db.rollback()
                    raise
        except SQLAlchemyError as exc:
            logger.error("Failed to delete transcription %s: %s", record_id, exc, exc_info=True)
            raise PersistenceError("Failed to delete transcription") from exc

        if not deleted:
            raise NotFoundError("Transcription not found")
        logger.info("Deleted transcription: %s", record_id)
        return True
