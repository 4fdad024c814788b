import asyncio
import io
import json

import pytest

from fastapi import UploadFile
from fastapi.testclient import TestClient

from app.core.exceptions import ValidationError
from app.core.settings import settings
from app.main import app
from app.routes import dependencies
from app.routes.reports import submit_report
from app.services.report_store import ReportStore
from app.services.report_submission_service import ReportSubmissionService

from conftest import BrokenFirestore, report_input

AUDIO = ("audio.m4a", b"fake m4a bytes", "audio/m4a")


def _post_report(client, files=None, **fields):
    data = {"reason": "Loud Music", "mediaType": "audio"}
    data.update({k: v for k, v in fields.items() if v is not None})
    return client.post("/reports/new-report", data=data, files=files if files is not None else {"media": AUDIO})


def test_new_report_returns_201_with_record(client, manila_location):
    response = _post_report(client, comment="", location=json.dumps({**manila_location, "timestamp": 1718000000000}))

    assert response.status_code == 201
    body = response.json()
    assert body["_id"] == body["id"]
    assert body["mediaType"] == "audio"
    assert body["reason"] == "Loud Music"
    assert body["geoLocation"] == {"type": "Point", "coordinates": [120.9842, 14.5995]}
    assert body["location"]["latitude"] == 14.5995
    assert body["location"]["address"]["city"] == "Manila"
    assert body["mediaUrl"].startswith("http://testserver/media/noise-reports/audio/")
    assert "createdAt" in body


def test_new_report_without_location(client):
    response = _post_report(client)
    assert response.status_code == 201
    assert response.json()["geoLocation"] is None
    assert response.json()["location"] is None


def test_new_report_without_media_is_400(client, store):
    response = _post_report(client, files={})
    assert response.status_code == 400
    assert "No content" in response.json()["message"]
    assert store.count() == 0


def test_new_report_with_empty_media_is_400(client, store):
    response = _post_report(client, files={"media": ("audio.m4a", b"", "audio/m4a")})
    assert response.status_code == 400
    assert store.count() == 0


def test_new_report_without_reason_is_400(client):
    response = client.post("/reports/new-report", data={"mediaType": "audio"}, files={"media": AUDIO})
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "Reason" in response.json()["message"]


def test_new_report_with_out_of_range_latitude_is_400(client, store):
    response = _post_report(client, location=json.dumps({"latitude": 95, "longitude": 120.9842}))
    assert response.status_code == 400
    assert "latitude" in response.json()["message"]
    assert store.count() == 0


def test_new_report_storage_failure_is_5xx_with_retry_message(media_storage):
    broken = ReportSubmissionService(store=ReportStore(db=BrokenFirestore()), media_storage=media_storage)
    app.dependency_overrides[dependencies.submission_service] = lambda: broken
    try:
        response = _post_report(TestClient(app))
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["message"] == "Could not save the report. Please try again."
    assert "Firestore unavailable" not in response.text


@pytest.mark.parametrize("path", ["/reports/get-report", "/reports/map-data", "/reports/count", "/reports/abc123"])
def test_read_failure_reports_a_load_error(path):
    app.dependency_overrides[dependencies.report_store] = lambda: ReportStore(db=BrokenFirestore())
    try:
        response = TestClient(app).get(path)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["message"] == "Could not load reports. Please try again."
    assert "Firestore unavailable" not in response.text


def test_get_report_lists_all(client, store):
    for reason in ("Construction", "Traffic", "Construction Noise"):
        store.create(report_input(reason=reason))

    response = client.get("/reports/get-report")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 3
    for item in body:
        assert {"_id", "mediaUrl", "mediaType", "reason", "comment", "location", "createdAt"} <= set(item)


def test_get_report_filters_by_reason(client, store):
    for reason in ("Construction", "Traffic", "Construction Noise"):
        store.create(report_input(reason=reason))

    response = client.get("/reports/get-report", params={"reason": "Construction"})

    assert sorted(item["reason"] for item in response.json()) == ["Construction", "Construction Noise"]


def test_near_endpoint(client, store):
    near = store.create(report_input(location={"latitude": 14.6000, "longitude": 120.9842}))
    store.create(report_input(location={"latitude": 10.3157, "longitude": 123.8854}))

    response = client.get("/reports/near", params={"longitude": 120.9842, "latitude": 14.5995, "maxDistance": 1000})

    assert response.status_code == 200
    body = response.json()
    assert [item["_id"] for item in body] == [near.id]
    assert body[0]["distanceMeters"] < 100


def test_near_endpoint_rejects_bad_latitude(client):
    response = client.get("/reports/near", params={"longitude": 120.0, "latitude": 95, "maxDistance": 1000})
    assert response.status_code == 400
    assert "latitude" in response.json()["message"]


def test_map_data(client, store, manila_location):
    located = store.create(report_input(location=manila_location))
    store.create(report_input(reason="Party"))

    body = client.get("/reports/map-data").json()

    assert body == [
        {
            "_id": located.id,
            "id": located.id,
            "reason": "Loud Music",
            "mediaType": "audio",
            "latitude": 14.5995,
            "longitude": 120.9842,
            "createdAt": body[0]["createdAt"],
        }
    ]


def test_count(client, store):
    store.create(report_input())
    assert client.get("/reports/count").json() == {"success": True, "count": 1}


def test_get_single_report(client, store):
    report = store.create(report_input(reason="Traffic"))

    response = client.get(f"/reports/{report.id}")

    assert response.status_code == 200
    assert response.json()["reason"] == "Traffic"


def test_get_missing_report_is_404(client):
    response = client.get("/reports/unknown-id")
    assert response.status_code == 404
    assert response.json()["message"] == "Report unknown-id not found"


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_new_report_over_size_limit_is_400(client, media_storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_MEDIA_BYTES", 4)

    response = _post_report(client)

    assert response.status_code == 400
    assert "too large" in response.json()["message"]
    assert media_storage.uploaded == []


def test_new_report_reads_at_most_one_byte_past_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_MEDIA_BYTES", 4)
    received = {}

    class CapturingService:
        def submit(self, media, *args):
            received["size"] = media.size
            raise ValidationError("stop")

    upload = UploadFile(file=io.BytesIO(b"x" * 1000), filename="long.m4a")

    with pytest.raises(ValidationError):
        asyncio.run(
            submit_report(
                media=upload,
                reason="Loud Music",
                mediaType="audio",
                comment=None,
                location=None,
                service=CapturingService(),
            )
        )

    assert received["size"] == 5
