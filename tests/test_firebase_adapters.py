from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

pytest.importorskip("google.cloud.firestore_v1")
pytest.importorskip("google.api_core")

from google.api_core import exceptions as gcloud_exceptions  # noqa: E402

from adapters.firebase_blobs import CloudStorageBlobStore  # noqa: E402
from adapters.firebase_store import FirestoreMessageStore  # noqa: E402
from core.errors import BlobDeleteError  # noqa: E402

CUTOFF = datetime(2024, 5, 2, tzinfo=timezone.utc)


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict) -> None:
        self.id = doc_id
        self._data = data
        self.reference = f"messages/{doc_id}"

    def to_dict(self) -> dict:
        return dict(self._data)


class FakeQuery:
    def __init__(self, db: "FakeFirestore") -> None:
        self._db = db
        self._limit = None
        self._after = None
        self.filter = None

    def where(self, filter=None):
        self.filter = filter
        return self

    def order_by(self, field):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def start_after(self, snapshot):
        self._after = snapshot
        return self

    def get(self):
        self._db.pages_read += 1
        docs = self._db.docs
        start = 0 if self._after is None else docs.index(self._after) + 1
        return docs[start : start + self._limit]


class FakeWriteBatch:
    def __init__(self) -> None:
        self.deleted: list[str] = []
        self.committed = False

    def delete(self, ref) -> None:
        self.deleted.append(ref)

    def commit(self) -> None:
        self.committed = True


class FakeFirestore:
    def __init__(self, docs: list[FakeSnapshot]) -> None:
        self.docs = docs
        self.pages_read = 0
        self.batches: list[FakeWriteBatch] = []

    def collection(self, name):
        assert name == "messages"
        return FakeQuery(self)

    def batch(self):
        batch = FakeWriteBatch()
        self.batches.append(batch)
        return batch


def _doc(doc_id: str, **extra) -> FakeSnapshot:
    data = {
        "uid": "uid-1",
        "displayName": "Mina",
        "timestamp": CUTOFF - timedelta(days=1),
    }
    data.update(extra)
    return FakeSnapshot(doc_id, data)


def test_query_pages_until_short_page() -> None:
    db = FakeFirestore([_doc(f"d{i}") for i in range(5)])
    store = FirestoreMessageStore(db, page_size=2)

    records = asyncio.run(store.find_older_than(CUTOFF))

    assert [record.record_id for record in records] == ["d0", "d1", "d2", "d3", "d4"]
    assert db.pages_read == 3


def test_snapshot_fields_are_mapped() -> None:
    db = FakeFirestore([_doc("p", imageUrl="https://x/a.jpg", storagePath="images/a.jpg")])
    store = FirestoreMessageStore(db)

    (record,) = asyncio.run(store.find_older_than(CUTOFF))

    assert record.sender_name == "Mina"
    assert record.blob_path_to_delete == "images/a.jpg"
    assert record.ref == "messages/p"


def test_batch_deletes_by_reference() -> None:
    db = FakeFirestore([_doc("a"), _doc("b")])
    store = FirestoreMessageStore(db)
    records = asyncio.run(store.find_older_than(CUTOFF))

    batch = store.batch()
    for record in records:
        batch.delete(record)
    asyncio.run(batch.commit())

    assert db.batches[0].deleted == ["messages/a", "messages/b"]
    assert db.batches[0].committed


class FakeBlob:
    def __init__(self, error=None) -> None:
        self._error = error

    def delete(self) -> None:
        if self._error:
            raise self._error


class FakeBucket:
    def __init__(self, errors: dict) -> None:
        self._errors = errors

    def blob(self, path):
        return FakeBlob(self._errors.get(path))


def test_missing_blob_becomes_blob_delete_error() -> None:
    store = CloudStorageBlobStore(FakeBucket({"images/a.jpg": gcloud_exceptions.NotFound("gone")}))

    with pytest.raises(BlobDeleteError) as excinfo:
        asyncio.run(store.delete("images/a.jpg"))

    assert excinfo.value.path == "images/a.jpg"


def test_blob_delete_success() -> None:
    store = CloudStorageBlobStore(FakeBucket({}))

    asyncio.run(store.delete("images/b.jpg"))
