import os

# Settings are read at import time; keep tests off real Firebase
os.environ["USE_MOCK_DB"] = "true"
os.environ["MOCK_DB_PATH"] = ""
os.environ["USE_MOCK_STORAGE"] = "true"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from app.config.mock_firestore import MockFirestore
from app.core.exceptions import StorageError
from app.main import app
from app.routes import dependencies
from app.services.auth_service import AuthService
from app.services.media_storage import LocalMediaStorage, MediaFile, MediaStorage
from app.services.report_store import ReportStore
from app.services.report_submission_service import ReportSubmissionService
from app.services.user_service import UserService

MEDIA_BASE_URL = "http://testserver/media"


class RecordingMediaStorage(LocalMediaStorage):
    """Local storage that remembers what was uploaded and deleted."""

    def __init__(self, root):
        super().__init__(root=str(root), base_url=MEDIA_BASE_URL)
        self.uploaded = []
        self.deleted = []

    def upload(self, media, folder):
        url = super().upload(media, folder)
        self.uploaded.append(url)
        return url

    def delete(self, url):
        super().delete(url)
        self.deleted.append(url)


class FailingMediaStorage(MediaStorage):
    def __init__(self):
        self.upload_calls = 0

    def upload(self, media, folder):
        self.upload_calls += 1
        raise StorageError(detail="bucket unreachable")

    def delete(self, url):
        raise StorageError(detail="bucket unreachable")


class BrokenFirestore:
    """Every call fails like a lost connection."""

    def collection(self, name):
        raise ConnectionError("Firestore unavailable")

    def collections(self):
        raise ConnectionError("Firestore unavailable")


@pytest.fixture
def db():
    return MockFirestore()


@pytest.fixture
def media_storage(tmp_path):
    return RecordingMediaStorage(tmp_path / "media")


@pytest.fixture
def store(db):
    return ReportStore(db=db)


@pytest.fixture
def submission(store, media_storage):
    return ReportSubmissionService(store=store, media_storage=media_storage)


@pytest.fixture
def users(db):
    return UserService(db=db)


@pytest.fixture
def auth(users, media_storage):
    return AuthService(users=users, media_storage=media_storage)


@pytest.fixture
def client(store, submission, users, auth):
    app.dependency_overrides[dependencies.report_store] = lambda: store
    app.dependency_overrides[dependencies.submission_service] = lambda: submission
    app.dependency_overrides[dependencies.user_service] = lambda: users
    app.dependency_overrides[dependencies.auth_service] = lambda: auth
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def audio_file():
    return MediaFile(filename="audio.m4a", content_type="audio/m4a", data=b"\x00\x00\x00\x20ftypM4A fake audio")


@pytest.fixture
def video_file():
    return MediaFile(filename="clip.mp4", content_type="video/mp4", data=b"\x00\x00\x00\x18ftypmp42 fake video")


@pytest.fixture
def manila_location():
    return {
        "latitude": 14.5995,
        "longitude": 120.9842,
        "address": {"city": "Manila", "region": "Metro Manila", "country": "Philippines"},
    }


def report_input(reason="Loud Music", media_type="audio", **overrides):
    data = {
        "mediaUrl": f"{MEDIA_BASE_URL}/noise-reports/{media_type}/sample",
        "mediaType": media_type,
        "reason": reason,
    }
    data.update(overrides)
    return data
