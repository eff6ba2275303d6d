"""Local filesystem blob store adapter.

Blobs are plain files under a root directory, addressed by the same relative
paths the chat app stores in storagePath (e.g. "images/a.jpg").
"""

from __future__ import annotations

import os

from core.errors import BlobDeleteError


class LocalBlobStore:
    """Filesystem stand-in for the managed blob store."""

    def __init__(self, root: str) -> None:
        self._root = os.path.abspath(root)

    def resolve(self, path: str) -> str:
        """Map a blob path to a file under the root, refusing to escape it."""

        full_path = os.path.abspath(os.path.join(self._root, path))
        if full_path == self._root or os.path.commonpath([self._root, full_path]) != self._root:
            raise ValueError(f"Blob path escapes the blob root: {path}")
        return full_path

    def put(self, path: str, data: bytes) -> None:
        full_path = self.resolve(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as handle:
            handle.write(data)

    def exists(self, path: str) -> bool:
        return os.path.isfile(self.resolve(path))

    async def delete(self, path: str) -> None:
        """Remove one blob. A missing file counts as a failure."""

        try:
            os.remove(self.resolve(path))
        except ValueError as exc:
            raise BlobDeleteError(path, str(exc)) from exc
        except FileNotFoundError as exc:
            raise BlobDeleteError(path, "no such object") from exc
        except OSError as exc:
            raise BlobDeleteError(path, str(exc)) from exc
