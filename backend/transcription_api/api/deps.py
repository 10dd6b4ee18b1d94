"""FastAPI dependencies resolving the components wired in ``create_app``."""

from fastapi import Request

from ..services.pipeline import TranscriptionPipeline
from ..services.store import TranscriptionStore


def get_store(request: Request) -> TranscriptionStore:
    return request.app.state.store


def get_pipeline(request: Request) -> TranscriptionPipeline:
    return request.app.state.pipeline
