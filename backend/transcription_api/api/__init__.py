# Router aggregator – import each route module here and expose ``api_router``
# for convenient inclusion in the FastAPI app.

from fastapi import APIRouter

from . import routes_transcription


api_router = APIRouter()
api_router.include_router(routes_transcription.router, prefix="/transcription", tags=["transcription"])
api_router.include_router(routes_transcription.collection_router, prefix="/transcriptions", tags=["transcription"])
