"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any store-specific document or blob types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class MessageRecord:
    """One chat message as stored in the document store."""

    record_id: str
    sender_id: str
    sender_name: str
    created_at: datetime
    text: Optional[str] = None
    image_url: Optional[str] = None
    storage_path: Optional[str] = None
    # Store-specific handle used to delete the document (DocumentReference,
    # SQLite row id, ...). Never inspected by the core.
    ref: Any = field(default=None, compare=False, repr=False)

    @property
    def blob_path_to_delete(self) -> Optional[str]:
        """Return the attachment path only when the message carries an image."""

        if self.image_url and self.storage_path:
            return self.storage_path
        return None


@dataclass
class SweepOutcome:
    """Transient summary of one sweep, used for logs and reports only."""

    cutoff: datetime
    matched: int = 0
    committed: int = 0
    batches_committed: int = 0
    batches_failed: int = 0
    blob_deletes_attempted: int = 0
    blob_deletes_failed: int = 0
    failed_blob_paths: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def blob_deletes_succeeded(self) -> int:
        return self.blob_deletes_attempted - self.blob_deletes_failed

    @property
    def is_noop(self) -> bool:
        return self.matched == 0
