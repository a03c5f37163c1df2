"""
Product Tracker - FastAPI Backend.

REST API for users, products, uploads and notes.
"""

from .main import app, create_app, main
from .dependencies import (
    Settings,
    get_settings,
    get_db,
    get_current_user,
    get_service_container,
    AuthenticatedUser,
    ServiceContainer,
)
from .schemas import (
    Credentials,
    AuthResponse,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    FileRecordResponse,
    NoteResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    # Application
    "app",
    "create_app",
    "main",
    # Dependencies
    "Settings",
    "get_settings",
    "get_db",
    "get_current_user",
    "get_service_container",
    "AuthenticatedUser",
    "ServiceContainer",
    # Schemas
    "Credentials",
    "AuthResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "FileRecordResponse",
    "NoteResponse",
    "HealthResponse",
    "ErrorResponse",
]
