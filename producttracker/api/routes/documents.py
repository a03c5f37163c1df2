"""
Document API Routes

Receipts, manuals and other uploads attached to products, plus freeform
notes. All endpoints are scoped to the authenticated user.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from loguru import logger

from producttracker.api.dependencies import (
    AuthenticatedUser,
    RowId,
    get_current_user,
    get_document_service,
)
from producttracker.api.schemas import (
    DeletedResponse,
    ErrorResponse,
    FileEnvelope,
    FileListEnvelope,
    FileRecordResponse,
    NoteEnvelope,
    NoteListEnvelope,
    NoteRequest,
    NoteResponse,
)
from producttracker.services.document_service import DocumentService


router = APIRouter(prefix="/documents", tags=["documents"])

# Multipart field carrying the upload
UPLOAD_FIELD = "productFile"


# =============================================================================
# File Endpoints
# =============================================================================

@router.post(
    "/upload/{product_id}/{file_type}",
    response_model=FileEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type, missing, disallowed or too large upload"},
        404: {"model": ErrorResponse, "description": "Product not found or unauthorized"},
    },
)
async def upload_file(
    product_id: RowId,
    file_type: str,
    product_file: Optional[UploadFile] = File(None, alias=UPLOAD_FIELD),
    description: Optional[str] = Form(None),
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """
    Upload a receipt, manual or other document for a product.

    At most one byte past the size cap is read, so oversized uploads are
    rejected without buffering them whole.
    """
    data = None
    originalname = None
    mimetype = None
    if product_file is not None:
        data = await product_file.read(documents.policy.max_bytes + 1)
        originalname = product_file.filename
        mimetype = product_file.content_type
        await product_file.close()

    record = await documents.upload_file(
        user_id=user.id,
        product_id=product_id,
        file_type=file_type,
        data=data,
        originalname=originalname,
        mimetype=mimetype,
        description=description,
    )
    return FileEnvelope(
        message="File uploaded and saved successfully",
        file=FileRecordResponse.model_validate(record),
    )


@router.get("/product/{product_id}/files", response_model=FileListEnvelope)
async def list_files(
    product_id: RowId,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    files = await documents.list_files(user.id, product_id)
    return FileListEnvelope(
        message="Files fetched successfully",
        files=[FileRecordResponse.model_validate(f) for f in files],
    )


@router.get(
    "/file/{file_id}/download",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse, "description": "File not found or unauthorized"}},
)
async def download_file(
    file_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """Stream a file back under its original name."""
    record, path = await documents.open_file(user.id, file_id)
    logger.info(f"Downloading file {record.id}")
    return FileResponse(
        path,
        media_type=record.mimetype,
        filename=record.originalname,
    )


@router.delete(
    "/file/{file_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse, "description": "File not found or unauthorized"}},
)
async def delete_file(
    file_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    deleted_id, payload_removed = await documents.delete_file(user.id, file_id)
    if payload_removed:
        message = "File deleted successfully"
    else:
        message = "File metadata deleted (file not found on disk)"
    return DeletedResponse(message=message, id=deleted_id)


# =============================================================================
# Note Endpoints
# =============================================================================

@router.post(
    "/notes/{product_id}",
    response_model=NoteEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Empty note content"},
        404: {"model": ErrorResponse, "description": "Product not found or unauthorized"},
    },
)
async def create_note(
    product_id: RowId,
    note: NoteRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    created = await documents.create_note(user.id, product_id, note.content)
    return NoteEnvelope(
        message="Note added successfully",
        note=NoteResponse.model_validate(created),
    )


@router.get("/product/{product_id}/notes", response_model=NoteListEnvelope)
async def list_notes(
    product_id: RowId,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    notes = await documents.list_notes(user.id, product_id)
    return NoteListEnvelope(
        message="Notes fetched successfully",
        notes=[NoteResponse.model_validate(n) for n in notes],
    )


@router.put(
    "/notes/{note_id}",
    response_model=NoteEnvelope,
    responses={
        400: {"model": ErrorResponse, "description": "Empty note content"},
        404: {"model": ErrorResponse, "description": "Note not found or unauthorized"},
    },
)
async def update_note(
    note_id: str,
    note: NoteRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    updated = await documents.update_note(user.id, note_id, note.content)
    return NoteEnvelope(
        message="Note updated successfully",
        note=NoteResponse.model_validate(updated),
    )


@router.delete(
    "/notes/{note_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse, "description": "Note not found or unauthorized"}},
)
async def delete_note(
    note_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    deleted_id = await documents.delete_note(user.id, note_id)
    return DeletedResponse(message="Note deleted successfully", id=deleted_id)
