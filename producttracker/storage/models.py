"""
Database models for Product Tracker.

Users and products are relational records. File and note metadata keep the
document-store shape: UUID string ids and a logical ``product_id`` reference
that the database does not enforce.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid4())


class User(Base):
    """User model for authentication."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class ProductModel(Base):
    """A product owned by exactly one user."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)

    # Purchase
    purchase_date = Column(Date)
    purchase_price = Column(Numeric(10, 2))
    warranty_expiry_date = Column(Date)

    # Identification
    model_number = Column(String(255))
    serial_number = Column(String(255))
    location_in_house = Column(String(255))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_products_owner_created", "user_id", "created_at"),
    )


class FileRecordModel(Base):
    """Metadata for an uploaded receipt, manual or other document."""
    __tablename__ = "files"

    id = Column(String(36), primary_key=True, default=_new_id)

    # Logical references (no foreign keys)
    product_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    filename = Column(String(255), unique=True, nullable=False)
    originalname = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    file_path = Column(String(500), nullable=False)
    description = Column(Text)
    file_type = Column(String(20), nullable=False, default="other")

    # "pending" until the payload write is confirmed
    status = Column(String(20), nullable=False, default="pending")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class NoteModel(Base):
    """Freeform note attached to a product."""
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True, default=_new_id)

    product_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
