import httpx
import pytest
from fastapi.testclient import TestClient

from transcription_api.db.database import Database
from transcription_api.main import create_app
from transcription_api.services.downloader import MockDownloader
from transcription_api.services.store import TranscriptionStore


def audio_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "audio/mpeg"})


@pytest.fixture
def database():
    db = Database("sqlite://").connect()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    return TranscriptionStore(database)


@pytest.fixture
def downloader():
    return MockDownloader(retry_delay=0, transport=httpx.MockTransport(audio_ok))


@pytest.fixture
def app(downloader):
    return create_app(database=Database("sqlite://"), downloader=downloader)


@pytest.fixture
def client(app):
    # Entering the context runs the start-up/shutdown events (DB open/close).
    with TestClient(app) as test_client:
        yield test_client
