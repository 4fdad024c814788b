import pytest

from app.core.exceptions import StorageError
from app.services.media_storage import FirebaseMediaStorage, MediaFile


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def upload_from_string(self, data, content_type=None):
        self.bucket.objects[self.name] = data

    def make_public(self):
        if self.bucket.fail_make_public:
            raise PermissionError("uniform bucket-level access is enabled")

    def exists(self):
        return self.name in self.bucket.objects

    def delete(self):
        self.bucket.objects.pop(self.name, None)


class FakeBucket:
    name = "noise-hub.appspot.com"

    def __init__(self, fail_make_public=False):
        self.fail_make_public = fail_make_public
        self.objects = {}

    def blob(self, name):
        return FakeBlob(self, name)


@pytest.fixture
def clip():
    return MediaFile(filename="clip.m4a", content_type="audio/m4a", data=b"fake m4a bytes")


def test_upload_returns_public_url(clip):
    bucket = FakeBucket()

    url = FirebaseMediaStorage(bucket=bucket).upload(clip, "noise-reports/audio")

    assert url.startswith("https://storage.googleapis.com/noise-hub.appspot.com/noise-reports/audio/")
    assert url.endswith(".m4a")
    assert list(bucket.objects.values()) == [clip.data]


def test_upload_removes_blob_when_make_public_fails(clip):
    bucket = FakeBucket(fail_make_public=True)

    with pytest.raises(StorageError) as exc_info:
        FirebaseMediaStorage(bucket=bucket).upload(clip, "noise-reports/audio")

    assert bucket.objects == {}
    assert exc_info.value.message == "Could not upload the media file. Please try again."
    assert "uniform bucket-level access" in exc_info.value.detail


def test_delete_by_public_url(clip):
    bucket = FakeBucket()
    storage = FirebaseMediaStorage(bucket=bucket)
    url = storage.upload(clip, "noise-reports/audio")

    storage.delete(url)
    storage.delete(url)

    assert bucket.objects == {}
