"""Unit tests for the DuckDB upload record store."""
from datetime import datetime, timezone

import pytest

from uploader.uploads.schemas import UploadRecord
from uploader.uploads.service import RecordStoreError, UploadRecordStore


@pytest.fixture
def store(tmp_path):
    """Create a record store with a temp database."""
    s = UploadRecordStore(str(tmp_path / "records.duckdb"))
    yield s
    s.close()


class TestUploadRecord:
    """Tests for the UploadRecord schema."""

    def test_json_uses_camel_case_keys(self):
        record = UploadRecord(name="Ada", email="ada@example.com", image_url="http://h/uploads/1.png")
        data = record.to_json()
        assert set(data) == {"id", "name", "email", "imageUrl", "createdAt", "updatedAt"}
        assert data["imageUrl"] == "http://h/uploads/1.png"

    def test_accepts_alias_on_input(self):
        record = UploadRecord(name="Ada", email="ada@example.com", imageUrl="http://h/uploads/1.png")
        assert record.image_url == "http://h/uploads/1.png"

    def test_empty_fields_rejected(self):
        with pytest.raises(ValueError):
            UploadRecord(name="", email="ada@example.com", image_url="http://h/uploads/1.png")


class TestUploadRecordStore:
    """Tests for UploadRecordStore."""

    def test_insert_assigns_id_and_timestamps(self, store):
        record = store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")

        assert record.id
        assert record.created_at == record.updated_at
        assert record.created_at.tzinfo is not None

    def test_insert_persists(self, store):
        created = store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")

        records = store.list_all()
        assert len(records) == 1
        assert records[0].id == created.id
        assert records[0].email == "ada@example.com"
        assert records[0].image_url == "http://h/uploads/1.png"
        assert isinstance(records[0].created_at, datetime)
        assert records[0].created_at.tzinfo == timezone.utc

    def test_find_by_email(self, store):
        store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")
        store.insert("Grace", "grace@example.com", "http://h/uploads/2.png")

        found = store.find_by_email("grace@example.com")
        assert found is not None
        assert found.name == "Grace"

    def test_find_by_email_missing(self, store):
        assert store.find_by_email("nobody@example.com") is None

    def test_duplicates_are_not_blocked_by_storage(self, store):
        store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")
        store.insert("Ada again", "ada@example.com", "http://h/uploads/2.png")
        assert len(store.list_all()) == 2

    def test_list_all_empty(self, store):
        assert store.list_all() == []

    def test_list_all_is_repeatable(self, store):
        store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")
        store.insert("Grace", "grace@example.com", "http://h/uploads/2.png")

        first = {r.id for r in store.list_all()}
        second = {r.id for r in store.list_all()}
        assert first == second

    def test_records_survive_reopen(self, tmp_path):
        path = str(tmp_path / "records.duckdb")
        s = UploadRecordStore(path)
        s.insert("Ada", "ada@example.com", "http://h/uploads/1.png")
        s.close()

        reopened = UploadRecordStore(path)
        try:
            assert reopened.find_by_email("ada@example.com") is not None
        finally:
            reopened.close()

    def test_operations_after_close_raise(self, store):
        store.close()
        with pytest.raises(RecordStoreError):
            store.list_all()
        with pytest.raises(RecordStoreError):
            store.find_by_email("ada@example.com")
        with pytest.raises(RecordStoreError):
            store.insert("Ada", "ada@example.com", "http://h/uploads/1.png")

    def test_unopenable_database_raises(self, tmp_path):
        with pytest.raises(RecordStoreError):
            UploadRecordStore(str(tmp_path / "missing-dir" / "records.duckdb"))
