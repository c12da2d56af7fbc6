"""Shared test fixtures and configuration for backend tests."""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from uploader.config import AppSettings, DatabaseSettings, StorageSettings
from uploader.main import create_app

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test upload directory and DuckDB file."""
    return AppSettings(
        database=DatabaseSettings(url=str(tmp_path / "uploads.duckdb")),
        storage=StorageSettings(upload_dir=str(tmp_path / "uploads")),
    )


@pytest.fixture
def upload_dir(settings):
    return Path(settings.storage.upload_dir)


@pytest.fixture
def api_client(settings):
    """TestClient with the lifespan running, so the upload context is open."""
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def png_bytes():
    """A 10 KB payload starting with the PNG signature."""
    return PNG_HEADER + b"\x00" * (10 * 1024 - len(PNG_HEADER))
