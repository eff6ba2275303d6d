"""Cloud Storage blob store adapter (firebase-admin default bucket)."""

from __future__ import annotations

import asyncio
from typing import Any

from google.api_core import exceptions as gcloud_exceptions

from core.errors import BlobDeleteError


class CloudStorageBlobStore:
    """BlobStorePort backed by a google-cloud-storage Bucket."""

    def __init__(self, bucket: Any) -> None:
        self._bucket = bucket

    async def delete(self, path: str) -> None:
        blob = self._bucket.blob(path)
        try:
            await asyncio.to_thread(blob.delete)
        except gcloud_exceptions.NotFound as exc:
            raise BlobDeleteError(path, "no such object") from exc
        except gcloud_exceptions.GoogleAPIError as exc:
            raise BlobDeleteError(path, str(exc)) from exc
