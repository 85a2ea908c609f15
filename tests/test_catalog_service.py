"""Tests for catalog service."""
import uuid
from decimal import Decimal

import pytest

from tabpos.exceptions.pos_exception import InvalidStateError, NotFoundError
from tabpos.schemas.catalog import CategoryCreate, CategoryUpdate, ItemCreate, ItemUpdate
from tabpos.services.catalog_service import (
    create_category,
    create_item,
    delete_category,
    delete_item,
    get_item,
    get_items_with_category,
    list_categories,
    list_items,
    update_category,
    update_item,
)
from tabpos.services.transaction_service import add_line, create_transaction


@pytest.mark.asyncio
class TestCategories:
    """Tests for category CRUD."""

    async def test_create_and_list(self, db_session):
        """Categories are listed by name."""
        await create_category(db_session, CategoryCreate(name="Wine"))
        await create_category(db_session, CategoryCreate(name="Beer", description="Taps"))

        names = [c.name for c in await list_categories(db_session)]
        assert names == ["Beer", "Wine"]

    async def test_update_keeps_unset_fields(self, db_session):
        """Partial updates only touch provided fields."""
        category = await create_category(
            db_session, CategoryCreate(name="Beer", description="Taps")
        )
        updated = await update_category(db_session, category.id, CategoryUpdate(name="Ales"))

        assert updated.name == "Ales"
        assert updated.description == "Taps"

    async def test_delete_empty_category(self, db_session):
        """Categories without items can be deleted."""
        category = await create_category(db_session, CategoryCreate(name="Seasonal"))
        await delete_category(db_session, category.id)
        assert await list_categories(db_session) == []

    async def test_delete_category_with_items_rejected(self, db_session, catalog):
        """A category that still holds items stays."""
        with pytest.raises(InvalidStateError):
            await delete_category(db_session, catalog["drinks"].id)

    async def test_missing_category(self, db_session):
        """Unknown category IDs raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await update_category(db_session, uuid.uuid4(), CategoryUpdate(name="x"))
        with pytest.raises(NotFoundError):
            await delete_category(db_session, uuid.uuid4())


@pytest.mark.asyncio
class TestItems:
    """Tests for item CRUD and lookup."""

    async def test_get_item(self, db_session, catalog):
        """Items are looked up by ID."""
        item = await get_item(db_session, catalog["coffee"].id)
        assert item.name == "Coffee"
        assert item.price == Decimal("3.50")
        assert item.in_stock is True

    async def test_get_missing_item(self, db_session):
        """Unknown item IDs raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await get_item(db_session, uuid.uuid4())

    async def test_list_items_by_category(self, db_session, catalog):
        """Filtering by category returns only its items, by name."""
        names = [i.name for i in await list_items(db_session, catalog["snacks"].id)]
        assert names == ["Cake", "Cookie"]
        assert len(await list_items(db_session)) == 4

    async def test_create_item(self, db_session, catalog):
        """New items default to in stock."""
        item = await create_item(
            db_session,
            ItemCreate(
                name="Tea",
                price=Decimal("2.00"),
                category_id=catalog["drinks"].id,
                sku="TEA-1",
            ),
        )
        assert item.in_stock is True
        assert item.sku == "TEA-1"

    async def test_create_item_unknown_category(self, db_session):
        """Items need an existing category."""
        with pytest.raises(NotFoundError):
            await create_item(
                db_session,
                ItemCreate(name="Tea", price=Decimal("2.00"), category_id=uuid.uuid4()),
            )

    async def test_update_item_unknown_category(self, db_session, catalog):
        """Moving an item to a missing category fails and leaves it in place."""
        with pytest.raises(NotFoundError):
            await update_item(
                db_session, catalog["coffee"].id, ItemUpdate(category_id=uuid.uuid4())
            )
        item = await get_item(db_session, catalog["coffee"].id)
        assert item.category_id == catalog["drinks"].id

    async def test_update_item_stock_flag(self, db_session, catalog):
        """Items can be marked back in stock."""
        item = await update_item(db_session, catalog["cake"].id, ItemUpdate(in_stock=True))
        assert item.in_stock is True
        assert item.price == Decimal("4.00")

    async def test_delete_unreferenced_item(self, db_session, catalog):
        """Items never sold can be deleted."""
        await delete_item(db_session, catalog["cake"].id)
        with pytest.raises(NotFoundError):
            await get_item(db_session, catalog["cake"].id)

    async def test_delete_referenced_item_rejected(self, db_session, catalog):
        """Items on any transaction line stay."""
        txn = await create_transaction(db_session)
        await add_line(db_session, txn.id, catalog["water"].id, 1)

        with pytest.raises(InvalidStateError):
            await delete_item(db_session, catalog["water"].id)

    async def test_items_with_category(self, db_session, catalog):
        """Names are resolved in one query; unknown IDs are skipped."""
        missing = uuid.uuid4()
        names = await get_items_with_category(
            db_session, [catalog["coffee"].id, catalog["cookie"].id, missing]
        )

        assert names == {
            catalog["coffee"].id: ("Coffee", "Drinks"),
            catalog["cookie"].id: ("Cookie", "Snacks"),
        }
        assert await get_items_with_category(db_session, []) == {}
