"""Firestore message store adapter.

Wraps the synchronous google-cloud-firestore client that firebase-admin hands
out, pushing each blocking call to a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from core.models import MessageRecord

LOGGER = logging.getLogger(__name__)

# Field names written by the chat client.
FIELD_SENDER_ID = "uid"
FIELD_SENDER_NAME = "displayName"
FIELD_TEXT = "text"
FIELD_IMAGE_URL = "imageUrl"
FIELD_STORAGE_PATH = "storagePath"
FIELD_TIMESTAMP = "timestamp"


def snapshot_to_record(snapshot: Any, timestamp_field: str = FIELD_TIMESTAMP) -> MessageRecord:
    """Build a MessageRecord from a Firestore DocumentSnapshot."""

    data = snapshot.to_dict() or {}
    return MessageRecord(
        record_id=snapshot.id,
        sender_id=str(data.get(FIELD_SENDER_ID, "")),
        sender_name=str(data.get(FIELD_SENDER_NAME, "")),
        created_at=data[timestamp_field],
        text=data.get(FIELD_TEXT),
        image_url=data.get(FIELD_IMAGE_URL),
        storage_path=data.get(FIELD_STORAGE_PATH),
        ref=snapshot.reference,
    )


class FirestoreDeleteBatch:
    """Adapter over a Firestore WriteBatch restricted to deletes."""

    def __init__(self, write_batch: Any) -> None:
        self._batch = write_batch

    def delete(self, record: MessageRecord) -> None:
        self._batch.delete(record.ref)

    async def commit(self) -> None:
        await asyncio.to_thread(self._batch.commit)


class FirestoreMessageStore:
    """MessageStorePort backed by a Firestore collection."""

    def __init__(
        self,
        db: Any,
        collection: str = "messages",
        timestamp_field: str = FIELD_TIMESTAMP,
        page_size: int = 500,
    ) -> None:
        self._db = db
        self._collection = collection
        self._timestamp_field = timestamp_field
        self._page_size = page_size

    def _page_query(self, cutoff: datetime, last: Optional[Any]) -> Any:
        query = (
            self._db.collection(self._collection)
            .where(filter=FieldFilter(self._timestamp_field, "<", cutoff))
            .order_by(self._timestamp_field)
            .limit(self._page_size)
        )
        if last is not None:
            query = query.start_after(last)
        return query

    async def find_older_than(self, cutoff: datetime) -> list[MessageRecord]:
        """Read all expired messages page by page before anything is deleted."""

        records: list[MessageRecord] = []
        last = None
        while True:
            page = await asyncio.to_thread(self._page_query(cutoff, last).get)
            records.extend(snapshot_to_record(snapshot, self._timestamp_field) for snapshot in page)
            if len(page) < self._page_size:
                break
            last = page[-1]
            LOGGER.debug("Fetched %s expired messages so far", len(records))
        return records

    def batch(self) -> FirestoreDeleteBatch:
        return FirestoreDeleteBatch(self._db.batch())
