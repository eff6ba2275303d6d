"""Error taxonomy for a sweep run.

Only QueryError and BatchCommitError fail a run. BlobDeleteError is raised by
blob adapters but is always absorbed by the sweeper and turned into a log
entry plus a counter on the outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from core.models import SweepOutcome


class SweepError(Exception):
    """Base class for errors that fail a sweep run."""


class QueryError(SweepError):
    """The expired-message query failed; nothing was deleted."""


class BatchCommitError(SweepError):
    """One or more delete batches failed to commit.

    Batches that committed before or after the failure stay deleted.
    """

    def __init__(self, failed_batches: Sequence[int], outcome: "SweepOutcome") -> None:
        self.failed_batches = list(failed_batches)
        self.outcome = outcome
        super().__init__(
            f"{len(self.failed_batches)} of "
            f"{outcome.batches_committed + outcome.batches_failed} delete batches failed "
            f"(batches {self.failed_batches})"
        )


class BlobDeleteError(Exception):
    """A single attachment could not be removed from the blob store."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to delete blob {path}: {reason}")
