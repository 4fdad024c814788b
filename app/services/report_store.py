"""
Report Store - durable storage and retrieval of noise reports in Firestore.

DESIGN NOTE:
- One document per report in the `noise_reports` collection
- A report is written once with a single set() call and never updated
- geoLocation is derived from location at write time (see app.utils.geo)
- Firestore has no 2dsphere index, so distance queries stream the
  geolocated documents and filter them with the haversine distance
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
import logging

from firebase_admin import firestore
from pydantic import ValidationError as PydanticValidationError

from app.config.firebase import get_db
from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.core.settings import settings
from app.models.report import (
    MapPoint,
    NearbyNoiseReport,
    NoiseReport,
    NoiseReportInput,
    parse_report_input,
)
from app.utils.firestore_helpers import snapshot_to_dict, to_datetime, where_filter
from app.utils.geo import derive_geo_point, haversine_distance, validate_coordinates

logger = logging.getLogger(__name__)

SAVE_FAILED = "Could not save the report. Please try again."
LOAD_FAILED = "Could not load reports. Please try again."


class ReportStore:
    """
    Firestore-backed store for NoiseReport records.
    """

    def __init__(self, db=None, collection: Optional[str] = None):
        self._db = db
        self.collection = collection or settings.REPORTS_COLLECTION

    @property
    def db(self):
        if self._db is None:
            try:
                self._db = get_db()
            except RuntimeError as e:
                logger.error(f"Report store has no database: {e}")
                raise StorageError(detail=str(e))
        return self._db

    def create(self, report: Union[NoiseReportInput, Dict[str, Any]]) -> NoiseReport:
        """
        Validate and persist one report.

        Args:
            report: NoiseReportInput or an equivalent dict

        Returns:
            NoiseReport: the stored record with its ID and createdAt

        Raises:
            ValidationError: missing/empty fields, bad mediaType, coordinates out of range
            StorageError: the Firestore write failed
        """
        report = parse_report_input(report)
        geo_point = derive_geo_point(report.location)

        document = {
            "mediaUrl": report.mediaUrl,
            "mediaType": report.mediaType.value,
            "reason": report.reason,
            "comment": report.comment,
            "location": report.location.model_dump(exclude_none=True) if report.location else None,
            "geoLocation": geo_point.model_dump() if geo_point else None,
            "createdAt": datetime.now(timezone.utc),
        }

        try:
            doc_ref = self.db.collection(self.collection).document()
            doc_ref.set(document)
        except StorageError as e:
            raise StorageError(SAVE_FAILED, detail=e.detail)
        except Exception as e:
            logger.error(f"Failed to save noise report to Firestore: {e}", exc_info=True)
            raise StorageError(SAVE_FAILED, detail=str(e))

        logger.info(f"Noise report saved: {doc_ref.id} (reason={report.reason!r}, mediaType={report.mediaType.value})")
        return self._to_report({**document, "id": doc_ref.id})

    def list(self, reason: Optional[str] = None) -> List[NoiseReport]:
        """
        All reports, newest first. With `reason`, only reports whose reason
        contains it (case-sensitive substring, which includes exact matches).
        """
        query = self._collection().order_by("createdAt", direction=firestore.Query.DESCENDING)

        reports = []
        for data in self._stream(query):
            if reason and reason not in (data.get("reason") or ""):
                continue
            report = self._to_report_or_none(data)
            if report is not None:
                reports.append(report)
        return reports

    def get(self, report_id: str) -> NoiseReport:
        """
        Raises:
            NotFoundError: no report with this ID
        """
        try:
            doc = self.db.collection(self.collection).document(report_id).get()
        except StorageError as e:
            raise StorageError(LOAD_FAILED, detail=e.detail)
        except Exception as e:
            logger.error(f"Failed to read noise report {report_id}: {e}", exc_info=True)
            raise StorageError(LOAD_FAILED, detail=str(e))

        if not doc.exists:
            raise NotFoundError(f"Report {report_id} not found")
        return self._to_report(snapshot_to_dict(doc))

    def near_location(
        self,
        longitude: float,
        latitude: float,
        max_distance_meters: float,
    ) -> List[NearbyNoiseReport]:
        """
        Reports whose geoLocation lies within max_distance_meters of the
        given point, nearest first.
        """
        validate_coordinates(longitude, latitude)
        if max_distance_meters is None or max_distance_meters <= 0:
            raise ValidationError("maxDistance must be a positive number of meters")

        nearby = []
        for data in self._stream_geolocated():
            point_lon, point_lat = data["geoLocation"]["coordinates"]
            distance = haversine_distance(latitude, longitude, point_lat, point_lon)
            if distance > max_distance_meters:
                continue
            try:
                nearby.append(NearbyNoiseReport(**self._normalize(data), distanceMeters=distance))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed noise report {data.get('id')}: {e}")

        nearby.sort(key=lambda report: report.distanceMeters)
        return nearby

    def map_points(self) -> List[MapPoint]:
        """Marker data for every report that has coordinates."""
        points = []
        for data in self._stream_geolocated():
            longitude, latitude = data["geoLocation"]["coordinates"]
            try:
                points.append(
                    MapPoint(
                        id=data["id"],
                        reason=data.get("reason") or "",
                        mediaType=data.get("mediaType"),
                        latitude=latitude,
                        longitude=longitude,
                        createdAt=to_datetime(data.get("createdAt")),
                    )
                )
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed noise report {data.get('id')}: {e}")
        return points

    def count(self) -> int:
        return sum(1 for _ in self._stream(self._collection()))

    def _collection(self):
        try:
            return self.db.collection(self.collection)
        except StorageError as e:
            raise StorageError(LOAD_FAILED, detail=e.detail)
        except Exception as e:
            logger.error(f"Failed to open collection {self.collection}: {e}")
            raise StorageError(LOAD_FAILED, detail=str(e))

    def _stream_geolocated(self):
        query = where_filter(self._collection(), "geoLocation.type", "==", "Point")
        for data in self._stream(query):
            coordinates = (data.get("geoLocation") or {}).get("coordinates") or []
            if len(coordinates) == 2:
                yield data

    def _stream(self, query):
        try:
            docs = list(query.stream())
        except Exception as e:
            logger.error(f"Failed to query noise reports: {e}", exc_info=True)
            raise StorageError(LOAD_FAILED, detail=str(e))
        for doc in docs:
            yield snapshot_to_dict(doc)

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": data["id"],
            "mediaUrl": data.get("mediaUrl"),
            "mediaType": data.get("mediaType"),
            "reason": data.get("reason"),
            "comment": data.get("comment"),
            "location": data.get("location"),
            "geoLocation": data.get("geoLocation"),
            "createdAt": to_datetime(data.get("createdAt")),
        }

    def _to_report(self, data: Dict[str, Any]) -> NoiseReport:
        return NoiseReport(**self._normalize(data))

    def _to_report_or_none(self, data: Dict[str, Any]) -> Optional[NoiseReport]:
        # Documents written by older clients may not fit the model
        try:
            return self._to_report(data)
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed noise report {data.get('id')}: {e}")
            return None


# Global store instance (singleton pattern)
_report_store = None


def get_report_store() -> ReportStore:
    """
    Get or create ReportStore singleton instance.

    Returns:
        ReportStore: The global report store instance
    """
    global _report_store
    if _report_store is None:
        _report_store = ReportStore()
    return _report_store
