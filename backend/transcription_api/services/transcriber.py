"""Mock speech-to-text.

No audio is ever decoded: the URL itself is hashed and used to pick one of a
fixed set of canned transcripts, so the same URL always "transcribes" to the
same text.
"""

import logging

logger = logging.getLogger(__name__)

CANNED_TRANSCRIPTIONS = (
    "This is a sample transcription of the audio file.",
    "Hello, this is a mock transcription service response.",
    "The audio has been successfully processed and transcribed.",
    "This is dummy transcribed text for testing purposes.",
    "Mock transcription: The speaker discussed various topics in this audio recording.",
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def string_hash(text: str) -> int:
    """Return the 32-bit signed ``hash * 31 + code`` fold over ``text``.

    Folds UTF-16 code units (not code points), so characters outside the
    BMP contribute two units, and wraps to a signed 32-bit integer after
    every step.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        value = _to_int32((value << 5) - value + code)
    return value


def transcribe(audio_url: str) -> str:
    """Return the canned transcript selected by ``audio_url``'s hash."""
    index = abs(string_hash(audio_url)) % len(CANNED_TRANSCRIPTIONS)
    logger.debug("Mock transcription for %s -> canned text #%d", audio_url, index)
    return CANNED_TRANSCRIPTIONS[index]
