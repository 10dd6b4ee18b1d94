"""Endpoints for creating, listing and deleting transcriptions.

* POST   /transcription               – run the mock pipeline for an audio URL.
* GET    /transcriptions              – list every record, newest first.
* DELETE /transcriptions/{record_id}  – delete one record.

The singular ``/transcription`` router also keeps the older ``/all`` listing,
``DELETE /{record_id}`` and the ``/test`` ping.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from fastapi import APIRouter, Body, Depends, status
from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models.transcription import TranscriptionRecord
from ..services.pipeline import TranscriptionPipeline
from ..services.store import TranscriptionStore
from .deps import get_pipeline, get_store

router = APIRouter()
collection_router = APIRouter()
logger = logging.getLogger(__name__)

T = TypeVar("T")

_url_adapter = TypeAdapter(AnyUrl)


class ApiResponse(BaseModel, Generic[T]):
    """Tagged envelope every endpoint answers with."""

    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None


class TranscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_url: Optional[str] = Field(default=None, alias="audioUrl")


class TranscriptionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    audio_url: str = Field(alias="audioUrl")
    transcription_text: str = Field(alias="transcriptionText")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_record(cls, record: TranscriptionRecord) -> "TranscriptionInfo":
        return cls(
            id=record.id,
            audio_url=record.audio_url,
            transcription_text=record.transcription_text,
            created_at=record.created_at,
        )


class CreatedInfo(BaseModel):
    id: str


class DeletedInfo(BaseModel):
    deleted: bool


def validate_audio_url(audio_url: Optional[str]) -> str:
    """Reject empty or non-absolute URLs before the pipeline runs."""
    if not audio_url:
        raise ValidationError("audioUrl is required")
    try:
        _url_adapter.validate_python(audio_url)
    except PydanticValidationError:
        raise ValidationError("Invalid audioUrl format") from None
    return audio_url


@router.get("/test")
async def ping_routes() -> dict[str, str]:
    return {"message": "Transcription routes working!"}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[CreatedInfo],
    response_model_exclude_none=True,
)
async def create_transcription(
    payload: Optional[TranscriptionRequest] = Body(default=None),
    pipeline: TranscriptionPipeline = Depends(get_pipeline),
) -> ApiResponse[CreatedInfo]:
    """Mock-download and mock-transcribe ``audioUrl``, then store the result."""
    audio_url = validate_audio_url(payload.audio_url if payload else None)
    record = await pipeline.process(audio_url)
    return ApiResponse[CreatedInfo](data=CreatedInfo(id=record.id))


@collection_router.get(
    "",
    response_model=ApiResponse[List[TranscriptionInfo]],
    response_model_exclude_none=True,
)
@router.get(
    "/all",
    response_model=ApiResponse[List[TranscriptionInfo]],
    response_model_exclude_none=True,
)
async def list_transcriptions(
    store: TranscriptionStore = Depends(get_store),
) -> ApiResponse[List[TranscriptionInfo]]:
    """Return all transcriptions, most recent first."""
    records = store.list_all()
    return ApiResponse[List[TranscriptionInfo]](
        data=[TranscriptionInfo.from_record(record) for record in records]
    )


@collection_router.delete(
    "/{record_id}",
    response_model=ApiResponse[DeletedInfo],
    response_model_exclude_none=True,
)
@router.delete(
    "/{record_id}",
    response_model=ApiResponse[DeletedInfo],
    response_model_exclude_none=True,
)
async def delete_transcription(
    record_id: str,
    store: TranscriptionStore = Depends(get_store),
) -> ApiResponse[DeletedInfo]:
    """Delete a transcription by ID (400 if malformed, 404 if absent)."""
    deleted = store.delete_by_id(record_id)
    return ApiResponse[DeletedInfo](data=DeletedInfo(deleted=deleted))
