"""
Report endpoints - API routes for noise report submission and retrieval.

Paths match what the mobile client already calls:
  POST /reports/new-report   multipart upload
  GET  /reports/get-report   admin list, optional ?reason=
  GET  /reports/map-data     map markers
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.settings import settings
from app.services.media_storage import MediaFile
from app.services.report_store import ReportStore
from app.services.report_submission_service import ReportSubmissionService, check_media_size
from app.routes.dependencies import report_store, submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/new-report", status_code=status.HTTP_201_CREATED)
async def submit_report(
    media: Optional[UploadFile] = File(None),
    reason: Optional[str] = Form(None),
    mediaType: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    service: ReportSubmissionService = Depends(submission_service),
):
    """
    Submit a new noise report.

    This endpoint:
    1. Validates the form fields and the media file
    2. Uploads the media to storage
    3. Stores the report in Firestore (noise_reports collection)

    Returns the created report with generated ID.
    """
    logger.info(f"📝 POST /reports/new-report - reason={reason!r}, mediaType={mediaType!r}")

    media_file = None
    if media is not None:
        if media.size is not None:
            check_media_size(media.size)
        # One byte past the limit is enough for submit() to reject it
        media_file = MediaFile(
            filename=media.filename or "",
            content_type=media.content_type or "",
            data=await media.read(settings.MAX_MEDIA_BYTES + 1),
        )

    report = await run_in_threadpool(
        service.submit,
        media_file,
        reason,
        mediaType,
        comment,
        location,
    )
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=report.to_wire())


@router.get("/get-report")
def get_reports(
    reason: Optional[str] = Query(None, description="Keep reports whose reason contains this text"),
    store: ReportStore = Depends(report_store),
):
    return [report.to_wire() for report in store.list(reason=reason)]


@router.get("/near")
def get_reports_near(
    longitude: float = Query(..., ge=-180, le=180),
    latitude: float = Query(..., ge=-90, le=90),
    maxDistance: float = Query(1000, gt=0, description="Radius in meters"),
    store: ReportStore = Depends(report_store),
):
    """Reports within maxDistance meters of a point, nearest first."""
    return [report.to_wire() for report in store.near_location(longitude, latitude, maxDistance)]


@router.get("/map-data")
def get_map_data(store: ReportStore = Depends(report_store)):
    return [point.to_wire() for point in store.map_points()]


@router.get("/count")
def count_reports(store: ReportStore = Depends(report_store)):
    return {"success": True, "count": store.count()}


@router.get("/{report_id}")
def get_report(report_id: str, store: ReportStore = Depends(report_store)):
    return store.get(report_id).to_wire()
