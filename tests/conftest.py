"""
Shared fixtures: in-memory SQLite backend, sample events and a test client
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from devevent.core.db import Database
from devevent.core.errors import ImageUploadError
from devevent.services.event_service import EventService
from devevent.services.image_service import ImageUploader
from devevent.services.repositories import SqlBackend
from main import create_app


class FakeUploader(ImageUploader):
    """Records uploads instead of calling the asset host"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads = []

    async def upload(self, data: bytes, filename: str) -> str:
        if self.fail:
            raise ImageUploadError("asset host unavailable")
        self.uploads.append((filename, data))
        return f"https://assets.example.com/TechEvents/{filename}"


def event_fields(**overrides):
    """Valid event fields; override any of them per test"""
    fields = {
        "title": "React Summit 2024",
        "description": "The biggest React conference worldwide.",
        "overview": "Two days of talks, workshops and networking.",
        "image": "https://assets.example.com/TechEvents/react.png",
        "venue": "Kromhouthal",
        "location": "Amsterdam, Netherlands",
        "date": "2024-06-14",
        "time": "09:00",
        "mode": "offline",
        "audience": "Frontend developers",
        "agenda": ["Keynote", "Workshops", "Closing party"],
        "organizer": "GitNation",
        "tags": ["react", "frontend"],
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def backend():
    """Fresh in-memory database per test"""
    backend = SqlBackend("sqlite://", poolclass=StaticPool)
    try:
        yield backend
    finally:
        backend.close()


@pytest.fixture
def repos(backend):
    with backend.repositories() as repos:
        yield repos


@pytest.fixture
def make_event(repos):
    """Persist an event through the normal save path"""
    def _make(**overrides):
        return EventService.save_event(repos, event_fields(**overrides))
    return _make


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def client(backend, uploader):
    app = create_app(database=Database(lambda: backend), uploader=uploader)
    with TestClient(app) as client:
        yield client
