"""
Product Repository for Product Tracker

Owner-scoped CRUD over the ``products`` table. Every lookup, update and
delete filters on both the product id and the owning user id, and a
mismatch on either is reported as the same ``NotFoundError``.

Partial updates are built from only the fields the caller supplied, so an
update carrying one field never touches the others.
"""

from typing import Any, Dict, List, Mapping

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from producttracker.exceptions import NoFieldsError, NotFoundError, ValidationError
from .models import ProductModel


MUTABLE_FIELDS = (
    "name",
    "category",
    "purchase_date",
    "purchase_price",
    "warranty_expiry_date",
    "model_number",
    "serial_number",
    "location_in_house",
)

REQUIRED_FIELDS = ("name", "category")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def build_product_update(partial_fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the column/value mapping for a partial product update.

    Unknown field names are ignored. A supplied ``None`` clears an optional
    field, but ``name`` and ``category`` can never be cleared.

    Args:
        partial_fields: Fields supplied by the caller.

    Returns:
        Mapping of column name to new value, containing only supplied fields.

    Raises:
        NoFieldsError: If no mutable field was supplied.
        ValidationError: If a required field is supplied empty.
    """
    values = {
        key: partial_fields[key]
        for key in MUTABLE_FIELDS
        if key in partial_fields
    }

    if not values:
        raise NoFieldsError()

    for key in REQUIRED_FIELDS:
        if key in values and _is_blank(values[key]):
            raise ValidationError(f"Product {key} cannot be empty.")

    return values


class ProductRepository:
    """
    Repository for owner-scoped product CRUD.

    Usage:
        repo = ProductRepository(session)
        product = await repo.create(owner_id, {"name": "Smart TV", "category": "Electronics"})
        product = await repo.update_by_id_for_owner(owner_id, product.id, {"purchase_price": 1250})
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, owner_id: int, fields: Mapping[str, Any]) -> ProductModel:
        """
        Create a product owned by ``owner_id``.

        Raises:
            ValidationError: If name or category is missing.
        """
        if any(_is_blank(fields.get(key)) for key in REQUIRED_FIELDS):
            raise ValidationError("Product name and category are required.")

        product = ProductModel(
            user_id=owner_id,
            **{key: fields[key] for key in MUTABLE_FIELDS if key in fields},
        )
        self.session.add(product)
        await self.session.commit()
        await self.session.refresh(product)

        logger.info(f"Created product {product.id} for user {owner_id}")
        return product

    async def list_by_owner(self, owner_id: int) -> List[ProductModel]:
        """All products owned by ``owner_id``, newest first."""
        stmt = (
            select(ProductModel)
            .where(ProductModel.user_id == owner_id)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_by_id_for_owner(self, owner_id: int, product_id: int) -> ProductModel:
        stmt = select(ProductModel).where(
            ProductModel.id == product_id,
            ProductModel.user_id == owner_id,
        )
        product = (await self.session.execute(stmt)).scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product")
        return product

    async def update_by_id_for_owner(
        self,
        owner_id: int,
        product_id: int,
        partial_fields: Mapping[str, Any],
    ) -> ProductModel:
        """
        Apply a partial update in a single UPDATE ... RETURNING statement.

        Raises:
            NoFieldsError: If no mutable field was supplied. Nothing is written.
            NotFoundError: If no product matches both id and owner.
        """
        values = build_product_update(partial_fields)

        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.user_id == owner_id,
            )
            .values(**values)
            .returning(ProductModel)
            .execution_options(populate_existing=True)
        )
        product = (await self.session.execute(stmt)).scalar_one_or_none()
        if product is None:
            await self.session.rollback()
            raise NotFoundError("Product")

        await self.session.commit()
        logger.info(f"Updated product {product_id} fields: {sorted(values)}")
        return product

    async def delete_by_id_for_owner(
        self,
        owner_id: int,
        product_id: int,
        commit: bool = True,
    ) -> int:
        """
        Delete an owned product.

        With ``commit=False`` the delete stays in the session's open
        transaction so the caller can commit it together with other writes.

        Returns:
            The deleted product id.

        Raises:
            NotFoundError: If no product matches both id and owner.
        """
        stmt = (
            delete(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.user_id == owner_id,
            )
            .returning(ProductModel.id)
        )
        deleted_id = (await self.session.execute(stmt)).scalar_one_or_none()
        if deleted_id is None:
            await self.session.rollback()
            raise NotFoundError("Product")

        if commit:
            await self.session.commit()
        logger.info(f"Deleted product {deleted_id} for user {owner_id}")
        return deleted_id
