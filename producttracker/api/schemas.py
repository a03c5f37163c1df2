"""
API Schemas for Product Tracker

Pydantic models for request validation and response serialization:
- Auth models
- Product models
- File and note models

Design Decisions:
1. Lenient requests: required product/auth fields are checked by the
   services so a missing field yields a 400 with a readable message
2. Envelope responses: every body carries a human-readable ``message``
   next to its payload field
3. Wire names: file and note fields are camelCase (``productId``,
   ``fileType``); product fields stay snake_case
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from producttracker.services.document_service import FileType


# =============================================================================
# Auth Schemas
# =============================================================================

class Credentials(BaseModel):
    """Register/login request."""

    email: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user1@example.com",
                "password": "password123",
            }
        }
    )


class UserPublic(BaseModel):
    """Public user fields."""

    id: int
    email: str


class AuthResponse(BaseModel):
    """Token plus the public user fields."""

    message: str
    token: str
    user: UserPublic


# =============================================================================
# Product Schemas
# =============================================================================

class ProductFields(BaseModel):
    """Mutable product fields, all optional at the schema level."""

    name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=255)

    purchase_date: Optional[date] = None
    purchase_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    warranty_expiry_date: Optional[date] = None

    model_number: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    location_in_house: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "name": "Smart TV",
                "category": "Electronics",
                "purchase_date": "2024-01-01",
                "purchase_price": 1200.00,
                "warranty_expiry_date": "2027-01-01",
                "model_number": "STV-55",
                "serial_number": "SN12345678901",
                "location_in_house": "Living Room",
            }
        },
    )


class ProductCreate(ProductFields):
    """Product creation request. ``name`` and ``category`` are required."""


class ProductUpdate(ProductFields):
    """Product update request (partial). Only fields present in the body are applied."""


class ProductResponse(BaseModel):
    """Product response model."""

    id: int
    user_id: int
    name: str
    category: str

    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    warranty_expiry_date: Optional[date] = None

    model_number: Optional[str] = None
    serial_number: Optional[str] = None
    location_in_house: Optional[str] = None

    created_at: datetime

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class ProductEnvelope(BaseModel):
    message: str
    product: ProductResponse


class ProductListEnvelope(BaseModel):
    message: str
    products: list[ProductResponse]


class DeletedResponse(BaseModel):
    """Confirmation of a delete with the removed id."""

    message: str
    id: Union[int, str]


# =============================================================================
# Document Schemas
# =============================================================================

class DocumentModel(BaseModel):
    """Base for camelCase document responses."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FileRecordResponse(DocumentModel):
    """Uploaded file metadata."""

    id: str
    product_id: int
    user_id: int
    filename: str
    originalname: str
    mimetype: str
    size: int
    file_path: str
    description: Optional[str] = None
    file_type: FileType = FileType.OTHER
    created_at: datetime
    updated_at: datetime


class FileEnvelope(BaseModel):
    message: str
    file: FileRecordResponse


class FileListEnvelope(BaseModel):
    message: str
    files: list[FileRecordResponse]


class NoteRequest(BaseModel):
    """Note create/update request."""

    content: Optional[str] = None


class NoteResponse(DocumentModel):
    """Note response model."""

    id: str
    product_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime


class NoteEnvelope(BaseModel):
    message: str
    note: NoteResponse


class NoteListEnvelope(BaseModel):
    message: str
    notes: list[NoteResponse]


# =============================================================================
# Error / System Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""

    message: str
    code: str
    detail: Optional[str] = None
    timestamp: datetime
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, str] = Field(default_factory=dict)
