"""
Product API Routes

Owner-scoped CRUD for product records. Every endpoint requires a token and
only ever sees the caller's own products.
"""

from fastapi import APIRouter, Depends, status
from loguru import logger

from producttracker.api.dependencies import (
    AuthenticatedUser,
    RowId,
    get_current_user,
    get_document_service,
    get_product_repository,
)
from producttracker.api.schemas import (
    DeletedResponse,
    ErrorResponse,
    ProductCreate,
    ProductEnvelope,
    ProductListEnvelope,
    ProductResponse,
    ProductUpdate,
)
from producttracker.services.document_service import DocumentService
from producttracker.storage.product_repository import ProductRepository


router = APIRouter(prefix="/products", tags=["products"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Product not found or unauthorized"}}


@router.post(
    "",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Name or category missing"}},
)
async def create_product(
    product: ProductCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """Create a product owned by the caller."""
    created = await repo.create(user.id, product.model_dump(exclude_unset=True))
    return ProductEnvelope(
        message="Product added successfully.",
        product=ProductResponse.model_validate(created),
    )


@router.get("", response_model=ProductListEnvelope)
async def list_products(
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """List the caller's products, newest first."""
    products = await repo.list_by_owner(user.id)
    return ProductListEnvelope(
        message="Products Fetched successfully.",
        products=[ProductResponse.model_validate(p) for p in products],
    )


@router.get("/{product_id}", response_model=ProductEnvelope, responses=NOT_FOUND)
async def get_product(
    product_id: RowId,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    product = await repo.get_by_id_for_owner(user.id, product_id)
    return ProductEnvelope(
        message="Product fetched successfully.",
        product=ProductResponse.model_validate(product),
    )


@router.put(
    "/{product_id}",
    response_model=ProductEnvelope,
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse, "description": "No fields provided for update"},
    },
)
async def update_product(
    product_id: RowId,
    product: ProductUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: ProductRepository = Depends(get_product_repository),
):
    """
    Update a product.

    Supports partial updates - only fields present in the body are modified.
    """
    updated = await repo.update_by_id_for_owner(
        user.id,
        product_id,
        product.model_dump(exclude_unset=True),
    )
    return ProductEnvelope(
        message="Product updated successfully",
        product=ProductResponse.model_validate(updated),
    )


@router.delete("/{product_id}", response_model=DeletedResponse, responses=NOT_FOUND)
async def delete_product(
    product_id: RowId,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """Delete a product along with its files and notes."""
    deleted_id, removed = await documents.delete_product(user.id, product_id)
    logger.info(f"Product {deleted_id} deleted with {removed} attached files")
    return DeletedResponse(message="Product deleted successfully", id=deleted_id)
