"""
Document Service

Coordinates file uploads, downloads and notes across the product store,
the document metadata store and payload storage.

Uploads are written in two phases: a pending metadata record is committed
first, then the payload is written, then the record is marked ready. A
crash between the phases leaves a pending record that
``purge_stale_uploads`` can find, instead of an untracked payload.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from loguru import logger

from producttracker.exceptions import (
    FileTooLargeError,
    NotFoundError,
    ServerError,
    UnsupportedFileTypeError,
    ValidationError,
)
from producttracker.storage.document_repository import DocumentRepository
from producttracker.storage.file_storage import LocalFileStorage
from producttracker.storage.models import FileRecordModel, NoteModel
from producttracker.storage.product_repository import ProductRepository


class FileType(str, Enum):
    """Kind of uploaded document."""
    RECEIPT = "receipt"
    MANUAL = "manual"
    OTHER = "other"


@dataclass
class UploadPolicy:
    """Size cap and allow-lists for uploads."""

    max_bytes: int = 5 * 1024 * 1024
    allowed_mimetypes: FrozenSet[str] = field(default_factory=lambda: frozenset({
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "application/pdf",
    }))
    allowed_extensions: FrozenSet[str] = field(default_factory=lambda: frozenset({
        ".jpeg",
        ".jpg",
        ".png",
        ".gif",
        ".pdf",
    }))

    def check_kind(self, originalname: str, mimetype: Optional[str]) -> None:
        """Both the declared content type and the extension must be allowed."""
        extension = Path(originalname or "").suffix.lower()
        if (mimetype or "").lower() not in self.allowed_mimetypes:
            raise UnsupportedFileTypeError(detail=f"Content type {mimetype!r} is not allowed")
        if extension not in self.allowed_extensions:
            raise UnsupportedFileTypeError(detail=f"Extension {extension!r} is not allowed")

    def check_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise FileTooLargeError(self.max_bytes)


def parse_file_type(value: str) -> FileType:
    try:
        return FileType(value)
    except ValueError:
        raise ValidationError(
            'Invalid file type. Must be "receipt", "manual", or "other".'
        )


def require_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationError("Note content cannot be empty.")
    return content


class DocumentService:
    """Files and notes attached to a user's products."""

    def __init__(
        self,
        documents: DocumentRepository,
        products: ProductRepository,
        storage: LocalFileStorage,
        policy: Optional[UploadPolicy] = None,
    ):
        self.documents = documents
        self.products = products
        self.storage = storage
        self.policy = policy or UploadPolicy()

    async def _require_owned_product(self, user_id: int, product_id: int) -> None:
        # Raises NotFoundError for another user's product
        await self.products.get_by_id_for_owner(user_id, product_id)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    async def upload_file(
        self,
        user_id: int,
        product_id: int,
        file_type: str,
        data: Optional[bytes],
        originalname: Optional[str],
        mimetype: Optional[str],
        description: Optional[str] = None,
    ) -> FileRecordModel:
        """
        Validate and store an upload.

        Raises:
            ValidationError: Invalid file type or no payload.
            UnsupportedFileTypeError: Content type or extension not allowed.
            FileTooLargeError: Payload over the size cap.
            NotFoundError: Product not owned by the user.
            ServerError: Payload could not be written.
        """
        kind = parse_file_type(file_type)

        if data is None or not originalname:
            raise ValidationError("No file uploaded.")

        self.policy.check_kind(originalname, mimetype)
        self.policy.check_size(len(data))
        await self._require_owned_product(user_id, product_id)

        payload = self.storage.reserve(originalname, user_id)
        record = await self.documents.create_pending_file(
            product_id=product_id,
            user_id=user_id,
            filename=payload.filename,
            originalname=originalname,
            mimetype=mimetype,
            size=len(data),
            file_path=payload.file_path,
            file_type=kind.value,
            description=description,
        )

        try:
            self.storage.write(payload, data)
        except OSError as e:
            logger.error(f"Payload write failed for {payload.file_path}: {e}")
            await self.documents.discard_file(record)
            raise ServerError("Server error during file upload.", detail=str(e)) from e

        record = await self.documents.mark_file_ready(record)
        logger.info(
            f"Stored {kind.value} {record.id} for product {product_id}, "
            f"size={len(data) // 1024}KB"
        )
        return record

    async def list_files(self, user_id: int, product_id: int) -> List[FileRecordModel]:
        return await self.documents.list_files(product_id, user_id)

    async def open_file(self, user_id: int, file_id: str) -> Tuple[FileRecordModel, Path]:
        """
        Locate an owned file's payload for download.

        Raises:
            NotFoundError: Record missing, not owned, or payload missing on disk.
        """
        record = await self.documents.get_file_for_owner(file_id, user_id)
        if not self.storage.exists(record.file_path):
            logger.warning(f"Payload missing for file {record.id}: {record.file_path}")
            raise NotFoundError("File", message="File not found on server disk.")
        return record, self.storage.resolve(record.file_path)

    def _remove_payload(self, file_path: str) -> bool:
        """Best-effort payload deletion; failures are logged, never raised."""
        try:
            return self.storage.delete(file_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not delete payload {file_path}: {e}")
            return False

    async def delete_file(self, user_id: int, file_id: str) -> Tuple[str, bool]:
        """
        Delete an owned file's metadata and, best effort, its payload.

        Returns:
            (deleted file id, whether a payload was removed)
        """
        record = await self.documents.get_file_for_owner(file_id, user_id)
        removed = self._remove_payload(record.file_path)
        deleted_id = await self.documents.delete_file(record)
        return deleted_id, removed

    async def delete_product(self, user_id: int, product_id: int) -> Tuple[int, int]:
        """
        Delete an owned product with all files and notes attached to it.

        Both repositories share the request session, so the product row and
        its documents are removed in one commit. Payloads are removed only
        after that commit.

        Returns:
            (deleted product id, number of files removed)

        Raises:
            NotFoundError: Product not owned by the user.
        """
        deleted_id = await self.products.delete_by_id_for_owner(user_id, product_id, commit=False)
        files = await self.documents.delete_for_product(deleted_id, user_id)
        for record in files:
            self._remove_payload(record.file_path)
        if files:
            logger.info(f"Removed {len(files)} files with product {deleted_id}")
        return deleted_id, len(files)

    async def purge_stale_uploads(self, max_age: timedelta = timedelta(hours=1)) -> int:
        """Remove pending records (and any partial payload) older than ``max_age``."""
        stale = await self.documents.list_pending_files(datetime.utcnow() - max_age)
        for record in stale:
            self._remove_payload(record.file_path)
            await self.documents.discard_file(record)
        if stale:
            logger.warning(f"Purged {len(stale)} interrupted uploads")
        return len(stale)

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def create_note(self, user_id: int, product_id: int, content: Optional[str]) -> NoteModel:
        content = require_content(content)
        await self._require_owned_product(user_id, product_id)
        return await self.documents.create_note(product_id, user_id, content)

    async def list_notes(self, user_id: int, product_id: int) -> List[NoteModel]:
        return await self.documents.list_notes(product_id, user_id)

    async def update_note(self, user_id: int, note_id: str, content: Optional[str]) -> NoteModel:
        content = require_content(content)
        return await self.documents.update_note(note_id, user_id, content)

    async def delete_note(self, user_id: int, note_id: str) -> str:
        return await self.documents.delete_note(note_id, user_id)
