"""Pytest fixtures for note store and API tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from domains.core import PersistenceError, register_core_services, reset_service_registry
from domains.note_hub.core.persistence import FileBlobStore, MemoryBlobStore, NoteRepository
from domains.note_hub.core.store import NoteStore


class FakeClock:
    """Deterministic time source; call to read, advance() to move forward."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FlakyBlobStore(MemoryBlobStore):
    """Memory medium whose writes can be switched off to simulate an outage."""

    name = "flaky"

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def write(self, key: str, blob: str) -> None:
        if self.fail_writes:
            raise PersistenceError(self.name, "medium unavailable")
        super().write(key, blob)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_blobs():
    return MemoryBlobStore()


@pytest.fixture
def make_store(memory_blobs, clock):
    """Build a NoteStore over the shared memory medium (a fresh instance per call)."""

    def _make(seed_sample: bool = False, blob_store=None) -> NoteStore:
        repo = NoteRepository(blob_store or memory_blobs)
        return NoteStore(repo, seed_sample=seed_sample, clock=clock)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture(params=["memory", "file"])
def blob_store(request, tmp_path):
    if request.param == "file":
        return FileBlobStore(tmp_path)
    return MemoryBlobStore()


@pytest.fixture
def registry(tmp_path):
    """Process-wide registry wired to a file medium under tmp_path."""
    reset_service_registry()
    registry = register_core_services(
        storage_backend="file",
        data_dir=tmp_path,
        seed_sample=False,
    )
    yield registry
    reset_service_registry()


@pytest.fixture
def client(registry):
    from app.main import app

    with TestClient(app) as client:
        yield client
