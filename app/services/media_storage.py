"""
Media storage - where audio/video evidence and profile photos live.

Two implementations behind one interface:
- FirebaseMediaStorage: Firebase Storage bucket (production)
- LocalMediaStorage: files on disk under MEDIA_ROOT (USE_MOCK_STORAGE=true)

Both return a public URL that is stored on the record.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import mimetypes
import uuid

from app.core.exceptions import StorageError
from app.core.settings import settings

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Could not upload the media file. Please try again."


@dataclass(frozen=True)
class MediaFile:
    """An uploaded file held in memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        suffix = Path(self.filename or "").suffix.lower()
        if suffix:
            return suffix
        return mimetypes.guess_extension(self.content_type or "") or ""


def build_object_name(folder: str, media: MediaFile) -> str:
    """Unique object path, e.g. noise-reports/audio/3f2a...c1.m4a"""
    return f"{folder.strip('/')}/{uuid.uuid4().hex}{media.extension}"


class MediaStorage(ABC):
    """
    Abstract object store for uploaded media.
    """

    @abstractmethod
    def upload(self, media: MediaFile, folder: str) -> str:
        """
        Store the file and return its public URL.

        Raises:
            StorageError: if the upload fails
        """
        pass

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove a previously uploaded object. Missing objects are ignored."""
        pass


class FirebaseMediaStorage(MediaStorage):
    """Uploads to the configured Firebase Storage bucket."""

    def __init__(self, bucket=None):
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            from app.config.firebase import get_bucket
            try:
                self._bucket = get_bucket()
            except Exception as e:
                logger.error(f"Firebase Storage unavailable: {e}")
                raise StorageError(detail=str(e))
        return self._bucket

    def upload(self, media: MediaFile, folder: str) -> str:
        object_name = build_object_name(folder, media)
        try:
            blob = self.bucket.blob(object_name)
            blob.upload_from_string(media.data, content_type=media.content_type)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to upload {object_name} to Firebase Storage: {e}", exc_info=True)
            raise StorageError(UPLOAD_FAILED, detail=str(e))

        try:
            blob.make_public()
        except Exception as e:
            logger.error(f"Failed to make {object_name} public, removing it: {e}", exc_info=True)
            self._remove_blob(blob)
            raise StorageError(UPLOAD_FAILED, detail=str(e))

        logger.info(f"Uploaded {object_name} ({media.size} bytes)")
        return blob.public_url

    def _remove_blob(self, blob) -> None:
        try:
            blob.delete()
        except Exception as e:
            logger.warning(f"Could not remove {blob.name} from Firebase Storage: {e}")

    def delete(self, url: str) -> None:
        object_name = self._object_name(url)
        if not object_name:
            return
        try:
            blob = self.bucket.blob(object_name)
            if blob.exists():
                blob.delete()
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to delete {object_name} from Firebase Storage: {e}")
            raise StorageError(detail=str(e))

    def _object_name(self, url: str) -> Optional[str]:
        prefix = f"/{self.bucket.name}/"
        _, _, path = url.partition(prefix)
        return path or None


class LocalMediaStorage(MediaStorage):
    """Writes files under a local directory. For development and tests."""

    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None):
        self.root = Path(root or settings.MEDIA_ROOT)
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")

    def upload(self, media: MediaFile, folder: str) -> str:
        object_name = build_object_name(folder, media)
        path = self.root / object_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(media.data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(UPLOAD_FAILED, detail=str(e))

        logger.info(f"Stored {object_name} locally ({media.size} bytes)")
        return f"{self.base_url}/{object_name}"

    def delete(self, url: str) -> None:
        if not url.startswith(self.base_url + "/"):
            return
        path = self.root / url[len(self.base_url) + 1:]
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(detail=str(e))


# Global storage instance (singleton pattern)
_media_storage = None


def get_media_storage() -> MediaStorage:
    """
    Get or create the MediaStorage singleton for the configured backend.
    """
    global _media_storage
    if _media_storage is None:
        if settings.USE_MOCK_STORAGE:
            logger.info(f"[MEDIA] USING LOCAL STORAGE at {settings.MEDIA_ROOT}")
            _media_storage = LocalMediaStorage()
        else:
            _media_storage = FirebaseMediaStorage()
    return _media_storage
