"""
Unit tests for the product repository and the partial-update builder.
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from producttracker.exceptions import NoFieldsError, NotFoundError, ValidationError
from producttracker.storage.product_repository import (
    ProductRepository,
    build_product_update,
)
from producttracker.storage.user_repository import UserRepository


@pytest_asyncio.fixture
async def owners(db_session):
    """Two users, returned as (owner_id, other_id)."""
    users = UserRepository(db_session)
    owner = await users.create("owner@example.com", "hash")
    other = await users.create("other@example.com", "hash")
    return owner.id, other.id


@pytest.fixture
def repo(db_session):
    return ProductRepository(db_session)


TV = {
    "name": "Smart TV",
    "category": "Electronics",
    "purchase_date": date(2024, 1, 1),
    "purchase_price": Decimal("1200.00"),
    "location_in_house": "Living Room",
}


class TestBuildProductUpdate:
    """Tests for the partial-update builder."""

    def test_keeps_only_supplied_fields(self):
        values = build_product_update({"purchase_price": 1250})

        assert values == {"purchase_price": 1250}

    def test_ignores_unknown_fields(self):
        values = build_product_update({"name": "TV", "id": 99, "user_id": 2, "colour": "black"})

        assert values == {"name": "TV"}

    def test_empty_input_raises_no_fields(self):
        with pytest.raises(NoFieldsError) as exc_info:
            build_product_update({})

        assert exc_info.value.message == "No fields provided for update."

    def test_only_unknown_fields_raises_no_fields(self):
        with pytest.raises(NoFieldsError):
            build_product_update({"user_id": 2})

    def test_optional_field_can_be_cleared(self):
        values = build_product_update({"serial_number": None})

        assert values == {"serial_number": None}

    @pytest.mark.parametrize("field", ["name", "category"])
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required_field_cannot_be_blanked(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            build_product_update({field: value})

        assert field in exc_info.value.message


@pytest.mark.asyncio
class TestProductRepository:
    """Tests for owner-scoped product CRUD."""

    async def test_create_returns_stored_product(self, repo, owners):
        owner_id, _ = owners

        product = await repo.create(owner_id, TV)

        assert product.id is not None
        assert product.user_id == owner_id
        assert product.name == "Smart TV"
        assert product.created_at is not None
        assert product.serial_number is None

    @pytest.mark.parametrize("missing", ["name", "category"])
    async def test_create_requires_name_and_category(self, repo, owners, missing):
        owner_id, _ = owners
        fields = {k: v for k, v in TV.items() if k != missing}

        with pytest.raises(ValidationError):
            await repo.create(owner_id, fields)

        assert await repo.list_by_owner(owner_id) == []

    async def test_list_is_scoped_and_newest_first(self, repo, owners):
        owner_id, other_id = owners
        first = await repo.create(owner_id, {"name": "Kettle", "category": "Kitchen"})
        second = await repo.create(owner_id, {"name": "Toaster", "category": "Kitchen"})
        await repo.create(other_id, {"name": "Drill", "category": "Tools"})

        products = await repo.list_by_owner(owner_id)

        assert [p.id for p in products] == [second.id, first.id]

    async def test_list_empty_for_new_owner(self, repo, owners):
        owner_id, _ = owners

        assert await repo.list_by_owner(owner_id) == []

    async def test_get_other_owners_product_is_not_found(self, repo, owners):
        owner_id, other_id = owners
        product = await repo.create(owner_id, TV)

        with pytest.raises(NotFoundError) as exc_info:
            await repo.get_by_id_for_owner(other_id, product.id)

        assert exc_info.value.status_code == 404

    async def test_get_missing_product_is_not_found(self, repo, owners):
        owner_id, _ = owners

        with pytest.raises(NotFoundError):
            await repo.get_by_id_for_owner(owner_id, 9999)

    async def test_partial_update_leaves_other_fields(self, repo, owners):
        """Updating the price must not clear the location."""
        owner_id, _ = owners
        product = await repo.create(owner_id, TV)

        updated = await repo.update_by_id_for_owner(
            owner_id, product.id, {"purchase_price": Decimal("1250")}
        )

        assert updated.purchase_price == Decimal("1250.00")
        assert updated.location_in_house == "Living Room"
        assert updated.name == "Smart TV"

        fetched = await repo.get_by_id_for_owner(owner_id, product.id)
        assert fetched.purchase_price == Decimal("1250.00")
        assert fetched.location_in_house == "Living Room"

    async def test_update_with_no_fields_writes_nothing(self, repo, owners):
        owner_id, _ = owners
        product = await repo.create(owner_id, TV)

        with pytest.raises(NoFieldsError):
            await repo.update_by_id_for_owner(owner_id, product.id, {})

        fetched = await repo.get_by_id_for_owner(owner_id, product.id)
        assert fetched.name == "Smart TV"

    async def test_update_other_owners_product_is_not_found(self, repo, owners):
        owner_id, other_id = owners
        product = await repo.create(owner_id, TV)
        product_id = product.id

        with pytest.raises(NotFoundError):
            await repo.update_by_id_for_owner(other_id, product_id, {"name": "Hijacked"})

        fetched = await repo.get_by_id_for_owner(owner_id, product_id)
        assert fetched.name == "Smart TV"

    async def test_delete_then_get_is_not_found(self, repo, owners):
        owner_id, _ = owners
        product = await repo.create(owner_id, TV)
        product_id = product.id

        deleted_id = await repo.delete_by_id_for_owner(owner_id, product_id)

        assert deleted_id == product_id
        with pytest.raises(NotFoundError):
            await repo.get_by_id_for_owner(owner_id, product_id)

    async def test_delete_other_owners_product_is_not_found(self, repo, owners):
        owner_id, other_id = owners
        product = await repo.create(owner_id, TV)
        product_id = product.id

        with pytest.raises(NotFoundError):
            await repo.delete_by_id_for_owner(other_id, product_id)

        assert [p.id for p in await repo.list_by_owner(owner_id)] == [product_id]
