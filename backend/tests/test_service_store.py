import dataclasses
import re
from contextlib import nullcontext
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from transcription_api.db.database import Database
from transcription_api.errors import NotFoundError, PersistenceError, ValidationError
from transcription_api.services.store import TranscriptionStore, is_valid_record_id

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_create_assigns_hex_id_and_keeps_fields(store):
    record = store.create("https://example.com/a.mp3", "some text", created_at=T0)

    assert re.fullmatch(r"[0-9a-f]{24}", record.id)
    assert record.audio_url == "https://example.com/a.mp3"
    assert record.transcription_text == "some text"
    assert record.created_at == T0


def test_create_defaults_created_at_to_now(store):
    before = datetime.now(timezone.utc)
    record = store.create("https://example.com/a.mp3", "text")
    after = datetime.now(timezone.utc)

    assert before <= record.created_at <= after


def test_create_gives_unique_ids(store):
    ids = {store.create("https://example.com/same.mp3", "text").id for _ in range(20)}
    assert len(ids) == 20


def test_records_are_immutable(store):
    record = store.create("https://example.com/a.mp3", "text")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.transcription_text = "changed"


def test_list_all_empty(store):
    assert store.list_all() == []


def test_list_all_newest_first(store):
    created = [
        store.create(f"https://example.com/audio{i}.mp3", "text", created_at=T0 + timedelta(seconds=i))
        for i in range(3)
    ]

    listed = store.list_all()

    assert [r.id for r in listed] == [r.id for r in reversed(created)]
    assert [r.created_at for r in listed] == sorted((r.created_at for r in created), reverse=True)
    assert all(r.created_at.tzinfo is not None for r in listed)


def test_list_all_ties_broken_by_reverse_insertion(store):
    first = store.create("https://example.com/1.mp3", "text", created_at=T0)
    second = store.create("https://example.com/2.mp3", "text", created_at=T0)
    third = store.create("https://example.com/3.mp3", "text", created_at=T0)

    assert [r.id for r in store.list_all()] == [third.id, second.id, first.id]


def test_delete_removes_exactly_one(store):
    keep = store.create("https://example.com/keep.mp3", "text", created_at=T0)
    drop = store.create("https://example.com/drop.mp3", "text", created_at=T0 + timedelta(seconds=1))

    assert store.delete_by_id(drop.id) is True

    remaining = store.list_all()
    assert [r.id for r in remaining] == [keep.id]
    with pytest.raises(NotFoundError):
        store.get_by_id(drop.id)


def test_delete_is_one_way(store):
    record = store.create("https://example.com/a.mp3", "text")
    store.delete_by_id(record.id)

    with pytest.raises(NotFoundError):
        store.delete_by_id(record.id)


def test_delete_unknown_id_is_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        store.delete_by_id("507f1f77bcf86cd799439011")
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize(
    "bad_id",
    ["invalid-id", "", "507f1f77bcf86cd79943901", "507f1f77bcf86cd7994390111", "zzzzzzzzzzzzzzzzzzzzzzzz"],
)
def test_delete_malformed_id_is_validation_error(store, bad_id):
    with pytest.raises(ValidationError) as exc_info:
        store.delete_by_id(bad_id)
    assert exc_info.value.status_code == 400


def test_ids_are_case_insensitive(store):
    record = store.create("https://example.com/a.mp3", "text")
    assert store.get_by_id(record.id.upper()) == record
    assert store.delete_by_id(record.id.upper()) is True


def test_get_by_id_round_trip(store):
    record = store.create("https://example.com/a.mp3", "text", created_at=T0)
    assert store.get_by_id(record.id) == record


def test_is_valid_record_id():
    assert is_valid_record_id("507f1f77bcf86cd799439011")
    assert not is_valid_record_id(None)
    assert not is_valid_record_id(12345)


def test_store_without_connection_raises_persistence_error():
    store = TranscriptionStore(Database("sqlite://"))

    with pytest.raises(PersistenceError):
        store.list_all()
    with pytest.raises(PersistenceError):
        store.create("https://example.com/a.mp3", "text")


def test_database_errors_become_persistence_errors(database, store):
    failing_db = MagicMock()
    failing_db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

    with patch.object(database, "session", return_value=nullcontext(failing_db)):
        with pytest.raises(PersistenceError):
            store.list_all()
        with pytest.raises(PersistenceError):
            store.delete_by_id("507f1f77bcf86cd799439011")


def test_failed_commit_is_rolled_back(database, store):
    failing_db = MagicMock()
    failing_db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

    with patch.object(database, "session", return_value=nullcontext(failing_db)):
        with pytest.raises(PersistenceError):
            store.create("https://example.com/a.mp3", "text")

    failing_db.rollback.assert_called_once()


def test_create_normalizes_offset_timestamps_to_utc(store):
    early = store.create(
        "https://example.com/early.mp3", "text",
        created_at=datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=5))),
    )
    late = store.create(
        "https://example.com/late.mp3", "text",
        created_at=datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc),
    )

    assert early.created_at == datetime(2024, 1, 1, 5, 0, tzinfo=timezone.utc)
    assert early.created_at.utcoffset() == timedelta(0)
    assert store.get_by_id(early.id).created_at == early.created_at
    assert [r.id for r in store.list_all()] == [late.id, early.id]


def test_create_treats_naive_timestamps_as_utc(store):
    record = store.create("https://example.com/a.mp3", "text", created_at=datetime(2024, 1, 1, 12, 0))

    assert record.created_at == T0
    assert store.get_by_id(record.id).created_at == T0


def test_unencodable_audio_url_is_persistence_error(store):
    with pytest.raises(PersistenceError) as exc_info:
        store.create("\ud800", "text")
    assert exc_info.value.status_code == 500
    assert store.list_all() == []
