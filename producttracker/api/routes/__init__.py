"""
API Routes for Product Tracker

Route modules:
- auth: registration and login
- products: owner-scoped product CRUD
- documents: file uploads and notes attached to products
"""

from producttracker.api.routes.auth import router as auth_router
from producttracker.api.routes.products import router as products_router
from producttracker.api.routes.documents import router as documents_router

__all__ = [
    "auth_router",
    "products_router",
    "documents_router",
]
