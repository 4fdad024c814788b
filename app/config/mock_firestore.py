"""
In-memory stand-in for the Firestore client (USE_MOCK_DB=true).

Implements only what the services use:
  db.collection(name).document(id).set/get/update/delete
  db.collection(name).where(...).order_by(...).limit(n).stream()
  db.collections()

When a path is given the whole database is written back to that JSON file
after every write, so local demos survive a restart.
"""

import copy
import json
import logging
import os
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_DATETIME_KEY = "__datetime__"


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_KEY: value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {_DATETIME_KEY}:
            return datetime.fromisoformat(value[_DATETIME_KEY])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _lookup(data: Dict, field_path: str) -> Any:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}


class MockDocumentSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        return copy.deepcopy(self._data) if self._data is not None else None


class MockDocumentReference:
    def __init__(self, db: "MockFirestore", collection: str, doc_id: str):
        self._db = db
        self._collection = collection
        self.id = doc_id

    def set(self, data: Dict) -> None:
        with self._db._lock:
            self._db._data.setdefault(self._collection, {})[self.id] = copy.deepcopy(data)
            self._db._persist()

    def update(self, data: Dict) -> None:
        with self._db._lock:
            docs = self._db._data.get(self._collection, {})
            if self.id not in docs:
                raise KeyError(f"No document to update: {self._collection}/{self.id}")
            docs[self.id].update(copy.deepcopy(data))
            self._db._persist()

    def delete(self) -> None:
        with self._db._lock:
            self._db._data.get(self._collection, {}).pop(self.id, None)
            self._db._persist()

    def get(self) -> MockDocumentSnapshot:
        with self._db._lock:
            data = self._db._data.get(self._collection, {}).get(self.id)
            return MockDocumentSnapshot(self.id, copy.deepcopy(data))


class MockQuery:
    def __init__(self, db: "MockFirestore", collection: str):
        self._db = db
        self._collection = collection
        self._filters: List[tuple] = []
        self._order: List[tuple] = []
        self._limit: Optional[int] = None

    def _clone(self) -> "MockQuery":
        query = MockQuery(self._db, self._collection)
        query._filters = list(self._filters)
        query._order = list(self._order)
        query._limit = self._limit
        return query

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {op_string}")
        query = self._clone()
        query._filters.append((field_path, op_string, value))
        return query

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "MockQuery":
        query = self._clone()
        query._order.append((field_path, direction))
        return query

    def limit(self, count: int) -> "MockQuery":
        query = self._clone()
        query._limit = count
        return query

    def stream(self):
        with self._db._lock:
            docs = copy.deepcopy(self._db._data.get(self._collection, {}))

        results = [
            (doc_id, data)
            for doc_id, data in docs.items()
            if all(_OPERATORS[op](_lookup(data, field), value) for field, op, value in self._filters)
        ]

        # Firestore drops documents missing an order_by field
        for field, direction in reversed(self._order):
            results = [item for item in results if _lookup(item[1], field) is not None]
            results.sort(key=lambda item: _lookup(item[1], field), reverse=direction == "DESCENDING")

        if self._limit is not None:
            results = results[: self._limit]

        for doc_id, data in results:
            yield MockDocumentSnapshot(doc_id, data)


class MockCollectionReference(MockQuery):
    def __init__(self, db: "MockFirestore", name: str):
        super().__init__(db, name)
        self.id = name

    def document(self, doc_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._db, self._collection, doc_id or uuid.uuid4().hex[:20])


class MockFirestore:
    def __init__(self, path: Optional[str] = None):
        self._path = path
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Dict]] = {}
        if path and os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                self._data = _decode(json.load(f))
            logger.info(f"[MOCK DB] Loaded {sum(len(d) for d in self._data.values())} documents from {path}")

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        with self._lock:
            return [MockCollectionReference(self, name) for name in self._data]

    def _persist(self) -> None:
        if not self._path:
            return
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(_encode(self._data), f, indent=2)


_mock_db: Optional[MockFirestore] = None


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    """Get or create the process-wide MockFirestore."""
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestore(path)
    return _mock_db
