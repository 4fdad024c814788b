from datetime import datetime, timezone

from app.config.mock_firestore import MockFirestore
from app.services.report_store import ReportStore

from conftest import report_input


def test_documents_survive_reload_from_file(tmp_path):
    path = str(tmp_path / "mock_db.json")
    created = ReportStore(db=MockFirestore(path)).create(
        report_input(location={"latitude": 14.5995, "longitude": 120.9842})
    )

    reloaded = ReportStore(db=MockFirestore(path)).get(created.id)

    assert reloaded.createdAt == created.createdAt
    assert reloaded.geoLocation.coordinates == [120.9842, 14.5995]


def test_where_order_by_and_limit():
    db = MockFirestore()
    people = db.collection("people")
    people.document("a").set({"kind": "user", "joined": datetime(2024, 1, 1, tzinfo=timezone.utc)})
    people.document("b").set({"kind": "user", "joined": datetime(2024, 3, 1, tzinfo=timezone.utc)})
    people.document("c").set({"kind": "admin", "joined": datetime(2024, 2, 1, tzinfo=timezone.utc)})

    query = people.where("kind", "==", "user").order_by("joined", direction="DESCENDING")

    assert [doc.id for doc in query.stream()] == ["b", "a"]
    assert [doc.id for doc in query.limit(1).stream()] == ["b"]


def test_nested_field_filter_and_missing_document():
    db = MockFirestore()
    db.collection("r").document("x").set({"geoLocation": {"type": "Point", "coordinates": [1, 2]}})
    db.collection("r").document("y").set({"geoLocation": None})

    assert [doc.id for doc in db.collection("r").where("geoLocation.type", "==", "Point").stream()] == ["x"]
    assert db.collection("r").document("nope").get().exists is False
