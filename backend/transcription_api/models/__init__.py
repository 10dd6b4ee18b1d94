# Namespace for ORM models and record types.
from .transcription import Transcription, TranscriptionRecord

__all__ = ["Transcription", "TranscriptionRecord"]
