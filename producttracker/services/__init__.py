"""
Service layer for Product Tracker

- auth_service: registration, login and token issuance
- document_service: file uploads, downloads and notes
"""

from producttracker.services.auth_service import (
    AuthService,
    AuthResult,
    TokenConfig,
)
from producttracker.services.document_service import (
    DocumentService,
    FileType,
    UploadPolicy,
)

__all__ = [
    "AuthService",
    "AuthResult",
    "TokenConfig",
    "DocumentService",
    "FileType",
    "UploadPolicy",
]
