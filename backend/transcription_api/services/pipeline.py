"""Download → transcribe → persist, one step after the other."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from ..models.transcription import TranscriptionRecord
from .downloader import MockDownloader
from .store import TranscriptionStore
from .transcriber import transcribe

logger = logging.getLogger(__name__)


class TranscriptionPipeline:
    def __init__(
        self,
        downloader: MockDownloader,
        store: TranscriptionStore,
        transcriber: Callable[[str], str] = transcribe,
    ) -> None:
        self.downloader = downloader
        self.store = store
        self.transcriber = transcriber

    async def process(self, audio_url: str) -> TranscriptionRecord:
        """Run the whole pipeline for ``audio_url`` and return the stored record.

        ``audio_url`` is stored verbatim.  In demo mode neither the download nor
        the transcription step can fail, so only store errors propagate.
        """
        logger.info("Processing transcription request for %s", audio_url)
        try:
            await self.downloader.download(audio_url)
            text = self.transcriber(audio_url)
            record = self.store.create(
                audio_url=audio_url,
                transcription_text=text,
                created_at=datetime.now(timezone.utc),
            )
        except Exception as exc:
            logger.error("Transcription processing failed for %s: %s", audio_url, exc)
            raise
        logger.info("Transcription %s completed for %s", record.id, audio_url)
        return record
