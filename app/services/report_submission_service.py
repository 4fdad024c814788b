"""
Report submission service - one noise report from upload to stored record.

Flow:
1. Validate everything the client sent (media, reason, mediaType, comment, location)
2. Upload the media file to media storage (one attempt)
3. Write the report to the Report Store (one attempt)

DESIGN NOTE:
- Nothing is uploaded until the input is known to be valid
- No retries; the first failure is returned to the caller
- If the store write fails, the uploaded file is deleted best-effort and
  the caller gets StorageError; no record is returned
"""

from typing import Any, Dict, Optional, Union
import logging

from app.core.exceptions import NoiseReportError, StorageError, ValidationError
from app.core.settings import settings
from app.models.report import (
    MediaType,
    NoiseReport,
    NoiseReportInput,
    ReportLocation,
    parse_location,
    parse_report_input,
)
from app.services.media_storage import MediaFile, MediaStorage, get_media_storage
from app.services.report_store import ReportStore, get_report_store

logger = logging.getLogger(__name__)

# Clients that cannot sniff the file send this; the declared mediaType is trusted
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

# Containers that are audio-only in practice but get a video/* type from some
# platforms (iOS voice memos are video/mp4 .m4a files)
AUDIO_EXTENSIONS = {".m4a", ".aac", ".mp3", ".wav", ".ogg", ".3gp", ".caf", ".amr"}


def check_media_size(size: int) -> None:
    """Raise ValidationError if an upload exceeds MAX_MEDIA_BYTES."""
    if size > settings.MAX_MEDIA_BYTES:
        raise ValidationError(f"Media file is too large (limit {settings.MAX_MEDIA_BYTES} bytes)")


class ReportSubmissionService:
    """
    Orchestrates a single noise-report submission.
    """

    MEDIA_FOLDER = "noise-reports"

    def __init__(self, store: Optional[ReportStore] = None, media_storage: Optional[MediaStorage] = None):
        self.store = store or get_report_store()
        self.media_storage = media_storage or get_media_storage()

    def submit(
        self,
        media: Optional[MediaFile],
        reason: Optional[str],
        media_type: Union[MediaType, str, None],
        comment: Optional[str] = None,
        location: Union[ReportLocation, Dict[str, Any], str, None] = None,
    ) -> NoiseReport:
        """
        Submit a noise report.

        Args:
            media: The audio or video evidence
            reason: Short classification, e.g. "Loud Music"
            media_type: "audio" or "video"
            comment: Optional details (at most 500 characters)
            location: ReportLocation, dict, or the JSON string sent by the client

        Returns:
            NoiseReport: The stored report

        Raises:
            ValidationError: bad or missing input (nothing uploaded, nothing stored)
            StorageError: upload or database write failed
        """
        if media is None or media.size == 0:
            raise ValidationError("No content. Please record audio or attach a video first.")
        check_media_size(media.size)
        if reason is None or not reason.strip():
            raise ValidationError("Reason is required. Please select a reason for this noise report.")

        media_type = self._parse_media_type(media_type)
        self._check_content_type(media, media_type)

        if not isinstance(location, ReportLocation):
            location = parse_location(location)

        # Same rules the store applies, checked before anything is uploaded
        parse_report_input({
            "mediaUrl": "pending-upload",
            "mediaType": media_type,
            "reason": reason,
            "comment": comment or None,
            "location": location,
        })

        media_url = self.media_storage.upload(media, f"{self.MEDIA_FOLDER}/{media_type.value}")

        try:
            report = self.store.create(
                NoiseReportInput(
                    mediaUrl=media_url,
                    mediaType=media_type,
                    reason=reason,
                    comment=comment or None,
                    location=location,
                )
            )
        except NoiseReportError as e:
            logger.error(f"Report write failed after upload of {media_url}; removing it: {e.message}")
            self._discard_upload(media_url)
            raise

        logger.info(f"Noise report submitted: {report.id} ({media_type.value}, {media.size} bytes)")
        return report

    def _parse_media_type(self, media_type: Union[MediaType, str, None]) -> MediaType:
        if isinstance(media_type, MediaType):
            return media_type
        if not media_type:
            raise ValidationError("mediaType is required (audio or video)")
        try:
            return MediaType(media_type.strip().lower())
        except ValueError:
            raise ValidationError(f"mediaType must be 'audio' or 'video', got {media_type!r}")

    def _check_content_type(self, media: MediaFile, media_type: MediaType) -> None:
        content_type = (media.content_type or "").split(";")[0].strip().lower()
        if content_type in GENERIC_CONTENT_TYPES:
            return

        family = content_type.split("/")[0]
        if family == media_type.value:
            return
        if media_type == MediaType.AUDIO and family == "video" and media.extension in AUDIO_EXTENSIONS:
            return

        raise ValidationError(
            f"Uploaded file type {content_type!r} does not match mediaType {media_type.value!r}"
        )

    def _discard_upload(self, media_url: str) -> None:
        try:
            self.media_storage.delete(media_url)
            logger.info(f"Removed orphaned upload {media_url}")
        except StorageError as e:
            logger.warning(f"Could not remove orphaned upload {media_url}: {e.detail or e.message}")


# Global service instance (singleton pattern)
_submission_service = None


def get_report_submission_service() -> ReportSubmissionService:
    """
    Get or create ReportSubmissionService singleton instance.
    """
    global _submission_service
    if _submission_service is None:
        _submission_service = ReportSubmissionService()
    return _submission_service
