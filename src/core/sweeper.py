"""Retention sweeper.

One run enforces a strict order:
1) Compute the cutoff (now - retention window)
2) Query every message older than the cutoff
3) Fast-exit when nothing matched (or on a dry run)
4) Commit document deletions in batches of at most max_batch_size
5) Fan out blob deletions for each committed batch
6) Await every blob deletion, then log and return the outcome

Document deletion is the authoritative signal that a message is gone. Blob
deletion is best-effort: a failed blob delete is logged and counted, and the
blob stays orphaned because later runs only look at documents.
Blobs are only deleted for batches that committed; a failed batch keeps its
blobs so the next run retries document and attachment together.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Sequence

from core.config import RetentionPolicy
from core.errors import BatchCommitError, QueryError
from core.models import MessageRecord, SweepOutcome
from core.ports import BlobStorePort, MessageStorePort

LOGGER = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def chunked(records: Sequence[MessageRecord], size: int) -> Iterator[Sequence[MessageRecord]]:
    """Yield consecutive slices of at most size records."""

    if size < 1:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(records), size):
        yield records[start : start + size]


class RetentionSweeper:
    """Deletes expired messages and their attachments."""

    def __init__(
        self,
        messages: MessageStorePort,
        blobs: BlobStorePort,
        policy: RetentionPolicy,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._messages = messages
        self._blobs = blobs
        self._policy = policy
        self._clock = clock or utc_now

    def cutoff(self) -> datetime:
        return self._clock() - self._policy.window

    async def run(self, dry_run: bool = False) -> SweepOutcome:
        """Run one sweep and return its outcome.

        Raises QueryError when the store cannot be queried and BatchCommitError
        when any delete batch failed. Blob failures never raise.
        """

        cutoff = self.cutoff()
        outcome = SweepOutcome(cutoff=cutoff, dry_run=dry_run)
        LOGGER.info("Sweep started (cutoff %s)", cutoff.isoformat())

        try:
            expired = await self._messages.find_older_than(cutoff)
        except Exception as exc:
            raise QueryError(f"Failed to query messages older than {cutoff.isoformat()}: {exc}") from exc

        outcome.matched = len(expired)
        if not expired:
            LOGGER.info("No messages older than the cutoff")
            return outcome

        if dry_run:
            LOGGER.info(
                "Dry run: %s messages (%s with attachments) would be deleted",
                outcome.matched,
                sum(1 for record in expired if record.blob_path_to_delete),
            )
            return outcome

        LOGGER.info("Deleting %s messages", outcome.matched)

        semaphore = asyncio.Semaphore(self._policy.blob_delete_concurrency)
        blob_tasks: list[asyncio.Task] = []
        failed_batches: list[int] = []

        for index, batch_records in enumerate(chunked(expired, self._policy.max_batch_size)):
            try:
                batch = self._messages.batch()
                for record in batch_records:
                    batch.delete(record)
                await batch.commit()
            except Exception:
                # Atomic per batch: nothing in this batch was deleted, and its
                # blobs are kept so the next run can retry both together.
                LOGGER.exception("Delete batch %s (%s messages) failed to commit", index, len(batch_records))
                failed_batches.append(index)
                outcome.batches_failed += 1
                continue

            outcome.batches_committed += 1
            outcome.committed += len(batch_records)
            LOGGER.debug("Delete batch %s committed (%s messages)", index, len(batch_records))

            for record in batch_records:
                path = record.blob_path_to_delete
                if path:
                    blob_tasks.append(asyncio.create_task(self._delete_blob(path, semaphore)))

        outcome.blob_deletes_attempted = len(blob_tasks)
        results = await asyncio.gather(*blob_tasks)
        outcome.failed_blob_paths = [path for path, ok in results if not ok]
        outcome.blob_deletes_failed = len(outcome.failed_blob_paths)

        LOGGER.info(
            "Sweep finished: matched=%s, deleted=%s, batches_failed=%s, blobs_deleted=%s, blobs_failed=%s",
            outcome.matched,
            outcome.committed,
            outcome.batches_failed,
            outcome.blob_deletes_succeeded,
            outcome.blob_deletes_failed,
        )
        if outcome.blob_deletes_failed:
            LOGGER.warning(
                "%s attachments are orphaned and will not be revisited: %s",
                outcome.blob_deletes_failed,
                ", ".join(outcome.failed_blob_paths),
            )

        if failed_batches:
            raise BatchCommitError(failed_batches, outcome)
        return outcome

    async def _delete_blob(self, path: str, semaphore: asyncio.Semaphore) -> tuple[str, bool]:
        async with semaphore:
            try:
                await self._blobs.delete(path)
            except Exception as exc:
                LOGGER.error("Failed to delete attachment %s: %s", path, exc)
                return path, False
        return path, True
