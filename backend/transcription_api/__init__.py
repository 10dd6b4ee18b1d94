"""Demo audio transcription service: mock download, mock transcription, CRUD store."""

__version__ = "0.1.0"
