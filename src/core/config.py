"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and the host can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# Firestore rejects write batches larger than this.
MAX_BATCH_SIZE = 500


@dataclass(frozen=True)
class RetentionPolicy:
    """How long messages live and how the sweeper may touch the stores."""

    retention_days: int = 30
    max_batch_size: int = MAX_BATCH_SIZE
    blob_delete_concurrency: int = 16

    def __post_init__(self) -> None:
        if self.retention_days < 1:
            raise ValueError("retention_days must be at least 1")
        if self.max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        if self.blob_delete_concurrency < 1:
            raise ValueError("blob_delete_concurrency must be at least 1")

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.retention_days)
