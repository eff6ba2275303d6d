"""Ports (interfaces) used by the retention sweeper.

Ports define the minimal contracts for the document store, the blob store and
outcome reporting so that the core can run against Firestore, SQLite or test
fakes without changes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from core.errors import SweepError
from core.models import MessageRecord, SweepOutcome


class DeleteBatchPort(Protocol):
    """A set of document deletions committed as one atomic unit."""

    def delete(self, record: MessageRecord) -> None:
        ...

    async def commit(self) -> None:
        ...


class MessageStorePort(Protocol):
    """Document store operations required by the sweeper."""

    async def find_older_than(self, cutoff: datetime) -> list[MessageRecord]:
        """Return every message whose timestamp is strictly before cutoff."""
        ...

    def batch(self) -> DeleteBatchPort:
        ...


class BlobStorePort(Protocol):
    """Blob store operations required by the sweeper."""

    async def delete(self, path: str) -> None:
        ...


class SweepReporterPort(Protocol):
    """Delivers sweep results to operators."""

    async def report(self, outcome: SweepOutcome) -> None:
        ...

    async def report_failure(self, error: SweepError) -> None:
        ...
