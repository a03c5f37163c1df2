"""
Document Repository for Product Tracker

Metadata for uploaded files and freeform notes. Records are scoped by the
owning user and point at a product through a logical ``product_id``.
Lookups by record id always filter on the owner as well.
"""

from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from producttracker.exceptions import NotFoundError
from .models import FileRecordModel, NoteModel


FILE_STATUS_PENDING = "pending"
FILE_STATUS_READY = "ready"


class DocumentRepository:
    """Owner-scoped storage for file metadata and notes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    async def create_pending_file(
        self,
        product_id: int,
        user_id: int,
        filename: str,
        originalname: str,
        mimetype: str,
        size: int,
        file_path: str,
        file_type: str = "other",
        description: Optional[str] = None,
    ) -> FileRecordModel:
        """Commit a file record whose payload has not been written yet."""
        record = FileRecordModel(
            product_id=product_id,
            user_id=user_id,
            filename=filename,
            originalname=originalname,
            mimetype=mimetype,
            size=size,
            file_path=file_path,
            file_type=file_type,
            description=description,
            status=FILE_STATUS_PENDING,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def mark_file_ready(self, record: FileRecordModel) -> FileRecordModel:
        record.status = FILE_STATUS_READY
        record.updated_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def discard_file(self, record: FileRecordModel) -> None:
        """Remove a record whose payload write failed."""
        await self.session.delete(record)
        await self.session.commit()

    async def list_files(self, product_id: int, user_id: int) -> List[FileRecordModel]:
        """Ready files for a product, newest first."""
        stmt = (
            select(FileRecordModel)
            .where(
                FileRecordModel.product_id == product_id,
                FileRecordModel.user_id == user_id,
                FileRecordModel.status == FILE_STATUS_READY,
            )
            .order_by(FileRecordModel.created_at.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_file_for_owner(self, file_id: str, user_id: int) -> FileRecordModel:
        stmt = select(FileRecordModel).where(
            FileRecordModel.id == file_id,
            FileRecordModel.user_id == user_id,
            FileRecordModel.status == FILE_STATUS_READY,
        )
        record = (await self.session.execute(stmt)).scalar_one_or_none()
        if record is None:
            raise NotFoundError("File")
        return record

    async def delete_file(self, record: FileRecordModel) -> str:
        file_id = record.id
        await self.session.delete(record)
        await self.session.commit()
        logger.info(f"Deleted file record {file_id}")
        return file_id

    async def list_pending_files(self, older_than: datetime) -> List[FileRecordModel]:
        """Pending records created before ``older_than``; left behind by interrupted uploads."""
        stmt = select(FileRecordModel).where(
            FileRecordModel.status == FILE_STATUS_PENDING,
            FileRecordModel.created_at < older_than,
        )
        return list((await self.session.execute(stmt)).scalars().all())

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def create_note(self, product_id: int, user_id: int, content: str) -> NoteModel:
        note = NoteModel(product_id=product_id, user_id=user_id, content=content)
        self.session.add(note)
        await self.session.commit()
        await self.session.refresh(note)
        logger.info(f"Created note {note.id} on product {product_id}")
        return note

    async def list_notes(self, product_id: int, user_id: int) -> List[NoteModel]:
        """Notes for a product, newest first."""
        stmt = (
            select(NoteModel)
            .where(
                NoteModel.product_id == product_id,
                NoteModel.user_id == user_id,
            )
            .order_by(NoteModel.created_at.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_note_for_owner(self, note_id: str, user_id: int) -> NoteModel:
        stmt = select(NoteModel).where(
            NoteModel.id == note_id,
            NoteModel.user_id == user_id,
        )
        note = (await self.session.execute(stmt)).scalar_one_or_none()
        if note is None:
            raise NotFoundError("Note")
        return note

    async def update_note(self, note_id: str, user_id: int, content: str) -> NoteModel:
        note = await self.get_note_for_owner(note_id, user_id)
        note.content = content
        note.updated_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def delete_note(self, note_id: str, user_id: int) -> str:
        note = await self.get_note_for_owner(note_id, user_id)
        await self.session.delete(note)
        await self.session.commit()
        logger.info(f"Deleted note {note_id}")
        return note_id

    # -------------------------------------------------------------------------
    # Product cascade
    # -------------------------------------------------------------------------

    async def delete_for_product(self, product_id: int, user_id: int) -> List[FileRecordModel]:
        """
        Delete every file record and note the user holds for a product.

        Returns:
            The deleted file records, so their payloads can be removed.
        """
        files = list((await self.session.execute(
            select(FileRecordModel).where(
                FileRecordModel.product_id == product_id,
                FileRecordModel.user_id == user_id,
            )
        )).scalars().all())

        await self.session.execute(
            delete(FileRecordModel).where(
                FileRecordModel.product_id == product_id,
                FileRecordModel.user_id == user_id,
            )
        )
        await self.session.execute(
            delete(NoteModel).where(
                NoteModel.product_id == product_id,
                NoteModel.user_id == user_id,
            )
        )
        await self.session.commit()
        return files
