"""
Storage Module for Product Tracker

Persistent storage for users, products and product documents:
- SQLAlchemy models (PostgreSQL in production, SQLite for development/testing)
- Owner-scoped repositories
- Local payload storage for uploads
"""

from producttracker.storage.models import (
    Base,
    User,
    ProductModel,
    FileRecordModel,
    NoteModel,
)
from producttracker.storage.user_repository import UserRepository
from producttracker.storage.product_repository import (
    ProductRepository,
    build_product_update,
    MUTABLE_FIELDS,
)
from producttracker.storage.document_repository import DocumentRepository
from producttracker.storage.file_storage import (
    LocalFileStorage,
    StoredPayload,
)

__all__ = [
    # Models
    "Base",
    "User",
    "ProductModel",
    "FileRecordModel",
    "NoteModel",
    # Repositories
    "UserRepository",
    "ProductRepository",
    "build_product_update",
    "MUTABLE_FIELDS",
    "DocumentRepository",
    # Payload storage
    "LocalFileStorage",
    "StoredPayload",
]
