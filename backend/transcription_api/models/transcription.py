"""SQLAlchemy model & value type for transcription records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from transcription_api.db.base import Base


class Transcription(Base):
    """Persistent representation of one transcription request and its result.

    ``seq`` records insertion order and breaks ``created_at`` ties when
    listing; ``id`` is the opaque identifier exposed to clients.
    """

    __tablename__ = "transcriptions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(24), unique=True, index=True, nullable=False)
    audio_url = Column(Text, nullable=False)
    transcription_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def to_record(self) -> "TranscriptionRecord":
        created_at = self.created_at
        # SQLite drops the offset on read; values are always stored as UTC.
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return TranscriptionRecord(
            id=self.id,
            audio_url=self.audio_url,
            transcription_text=self.transcription_text,
            created_at=created_at,
        )


@dataclass(frozen=True)
class TranscriptionRecord:
    """Immutable view of a stored transcription handed out by the store."""

    id: str
    audio_url: str
    transcription_text: str
    created_at: datetime
