"""
Pydantic models for noise reports.
These models handle validation for report submission and responses.

Field names are camelCase because they are the wire format the mobile
client already speaks (mediaUrl, mediaType, geoLocation, createdAt).
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError

MAX_COMMENT_LENGTH = 500


class MediaType(str, Enum):
    """Kind of evidence attached to a report."""
    AUDIO = "audio"
    VIDEO = "video"


class ReportAddress(BaseModel):
    """
    Place description produced by the client's reverse geocoder.
    Every field is optional; unknown keys are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    street: Optional[str] = None
    streetNumber: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    subregion: Optional[str] = None
    region: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None
    isoCountryCode: Optional[str] = None
    formattedAddress: Optional[str] = None


class ReportLocation(BaseModel):
    """
    Where the noise was recorded. Latitude, longitude and address are
    independent of each other; any of them may be missing.
    """
    model_config = ConfigDict(extra="ignore")

    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in degrees")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in degrees")
    address: Optional[ReportAddress] = Field(None, description="Reverse-geocoded place description")
    timestamp: Optional[Union[float, str]] = Field(None, description="Client capture time, passed through as sent")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class GeoPoint(BaseModel):
    """GeoJSON Point. Coordinates are [longitude, latitude]."""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)


class NoiseReportInput(BaseModel):
    """
    Everything needed to create a report once the media is stored.
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "mediaUrl": "https://storage.googleapis.com/noise-hub/noise-reports/audio/3f2a.m4a",
                "mediaType": "audio",
                "reason": "Loud Music",
                "comment": "Karaoke next door since 10pm",
                "location": {
                    "latitude": 14.5995,
                    "longitude": 120.9842,
                    "address": {"city": "Manila", "country": "Philippines"},
                },
            }
        },
    )

    mediaUrl: str = Field(..., min_length=1, description="URL of the stored audio/video evidence")
    mediaType: MediaType = Field(..., description="audio or video")
    reason: str = Field(..., min_length=1, description="Short classification, e.g. 'Loud Music'")
    comment: Optional[str] = Field(None, max_length=MAX_COMMENT_LENGTH, description="Optional details")
    location: Optional[ReportLocation] = None

    @field_validator("mediaUrl", "reason")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class NoiseReport(BaseModel):
    """
    A stored noise report (what the API returns).
    """
    id: str = Field(..., description="Firestore document ID")
    mediaUrl: str
    mediaType: MediaType
    reason: str
    comment: Optional[str] = None
    location: Optional[ReportLocation] = None
    geoLocation: Optional[GeoPoint] = None
    createdAt: datetime

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict, with `_id` alongside `id` for older clients."""
        data = self.model_dump(mode="json")
        data["_id"] = self.id
        return data


class NearbyNoiseReport(NoiseReport):
    """Report returned by a distance query."""
    distanceMeters: float = Field(..., ge=0, description="Great-circle distance from the query point")


class MapPoint(BaseModel):
    """Minimal marker data for the map screen."""
    id: str
    reason: str
    mediaType: MediaType
    latitude: float
    longitude: float
    createdAt: datetime

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["_id"] = self.id
        return data


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into one readable line: 'reason: must not be empty; ...'."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "input"
        message = error.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{field}: {message}")
    return "; ".join(parts)


def parse_report_input(data: Union[NoiseReportInput, Dict[str, Any]]) -> NoiseReportInput:
    """
    Validate raw input into a NoiseReportInput.

    Models are re-validated too, so an instance built with model_construct
    cannot slip past the rules.

    Raises:
        ValidationError: on any missing or out-of-range field
    """
    if isinstance(data, NoiseReportInput):
        data = data.model_dump()
    try:
        return NoiseReportInput.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e))


def parse_location(raw: Union[str, Dict[str, Any], None]) -> Optional[ReportLocation]:
    """
    Parse the `location` form field (a JSON string) into a ReportLocation.

    Empty strings and JSON null mean "no location".

    Raises:
        ValidationError: if the value is not a JSON object or is out of range
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("location must be a JSON object")
        if raw is None:
            return None
    if not isinstance(raw, dict):
        raise ValidationError("location must be a JSON object")
    try:
        return ReportLocation.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError("location." + describe_validation_error(e))
