"""
Local File Storage

Stores upload payloads on disk under a fixed root, one subdirectory per
owner. Filenames get a timestamp and random suffix so they never collide.
"""

import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from loguru import logger


@dataclass
class StoredPayload:
    """Where a payload lives in storage."""

    filename: str
    file_path: str  # relative to the storage root


class LocalFileStorage:
    """
    Disk-backed payload storage.

    Usage:
        storage = LocalFileStorage("./uploads")
        payload = storage.store(data, "receipt.pdf", owner_id=1)
        path = storage.resolve(payload.file_path)
    """

    def __init__(self, root: Union[str, Path], field_name: str = "productFile"):
        self.root = Path(root).resolve()
        self.field_name = field_name
        self.root.mkdir(parents=True, exist_ok=True)

    def reserve(self, original_name: str, owner_id: int) -> StoredPayload:
        """Assign a unique filename and path without writing anything."""
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
        extension = Path(original_name or "").suffix.lower()
        filename = f"{self.field_name}-{suffix}{extension}"
        return StoredPayload(
            filename=filename,
            file_path=f"{owner_id}/{filename}",
        )

    def write(self, payload: StoredPayload, data: bytes) -> Path:
        path = self.resolve(payload.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug(f"Wrote {len(data)} bytes to {payload.file_path}")
        return path

    def store(self, data: bytes, original_name: str, owner_id: int) -> StoredPayload:
        """Reserve a location and write the payload to it."""
        payload = self.reserve(original_name, owner_id)
        self.write(payload, data)
        return payload

    def resolve(self, file_path: str) -> Path:
        """
        Absolute path for a stored relative path.

        Raises:
            ValueError: If the path escapes the storage root.
        """
        path = (self.root / file_path).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"Path outside storage root: {file_path}")
        return path

    def exists(self, file_path: str) -> bool:
        return self.resolve(file_path).is_file()

    def delete(self, file_path: str) -> bool:
        """
        Remove a payload.

        Returns:
            True if a payload was removed, False if it was already missing.
        """
        path = self.resolve(file_path)
        if not path.is_file():
            return False
        path.unlink()
        return True
