"""Catalog service module.

The catalog store: category and item CRUD, plus the ``get_item`` lookup the
transaction engine uses to price new lines.
"""
import logging
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.exceptions.pos_exception import InvalidStateError, NotFoundError
from tabpos.models.catalog import Category, Item
from tabpos.models.transaction import TransactionLine
from tabpos.schemas.catalog import CategoryCreate, CategoryUpdate, ItemCreate, ItemUpdate
from tabpos.services.concurrency import atomic

logger = logging.getLogger(__name__)


# --- Categories ---


async def list_categories(db: AsyncSession) -> list[Category]:
    """List all categories ordered by name."""
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: UUID) -> Category:
    """Get a category by ID."""
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"Category '{category_id}' not found")
    return category


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    """Create a new category."""
    category = Category(name=data.name, description=data.description)
    async with atomic(db):
        db.add(category)
    await db.refresh(category)
    return category


async def update_category(db: AsyncSession, category_id: UUID, data: CategoryUpdate) -> Category:
    """Update a category; only provided fields change."""
    async with atomic(db):
        category = await get_category(db, category_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(category, field, value)
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: UUID) -> None:
    """Delete a category that no longer has items."""
    async with atomic(db):
        category = await get_category(db, category_id)
        item_count = await db.scalar(
            select(func.count()).select_from(Item).where(Item.category_id == category_id)
        )
        if item_count:
            raise InvalidStateError(
                f"Category '{category_id}' still has {item_count} item(s)"
            )
        await db.delete(category)


# --- Items ---


async def list_items(db: AsyncSession, category_id: Optional[UUID] = None) -> list[Item]:
    """List items ordered by name, optionally restricted to one category."""
    query = select(Item)
    if category_id is not None:
        query = query.where(Item.category_id == category_id)
    result = await db.execute(query.order_by(Item.name))
    return list(result.scalars().all())


async def get_item(db: AsyncSession, item_id: UUID) -> Item:
    """Get an item by ID.

    Raises:
        NotFoundError: if the item does not exist
    """
    item = await db.get(Item, item_id)
    if item is None:
        raise NotFoundError(f"Item '{item_id}' not found")
    return item


async def get_items_with_category(
    db: AsyncSession,
    item_ids: Iterable[UUID],
) -> dict[UUID, tuple[str, Optional[str]]]:
    """Map item IDs to (item name, category name) for display.

    Items missing from the catalog are simply absent from the result.
    """
    ids = list(item_ids)
    if not ids:
        return {}
    query = (
        select(Item.id, Item.name, Category.name.label("category_name"))
        .outerjoin(Category, Category.id == Item.category_id)
        .where(Item.id.in_(ids))
    )
    result = await db.execute(query)
    return {row.id: (row.name, row.category_name) for row in result.all()}


async def create_item(db: AsyncSession, data: ItemCreate) -> Item:
    """Create a new item in an existing category."""
    async with atomic(db):
        await get_category(db, data.category_id)
        item = Item(
            name=data.name,
            description=data.description,
            price=data.price,
            category_id=data.category_id,
            sku=data.sku,
            in_stock=data.in_stock,
        )
        db.add(item)
    await db.refresh(item)
    logger.info("Created item %s (%s) at %s", item.id, item.name, item.price)
    return item


async def update_item(db: AsyncSession, item_id: UUID, data: ItemUpdate) -> Item:
    """
    Update an item; only provided fields change.

    Price changes never touch existing transaction lines, which keep the
    price they were added at.
    """
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    async with atomic(db):
        item = await get_item(db, item_id)
        if "category_id" in update_data:
            await get_category(db, update_data["category_id"])
        for field, value in update_data.items():
            setattr(item, field, value)
    await db.refresh(item)
    return item


async def delete_item(db: AsyncSession, item_id: UUID) -> None:
    """Delete an item that no transaction line references."""
    async with atomic(db):
        item = await get_item(db, item_id)
        line_count = await db.scalar(
            select(func.count())
            .select_from(TransactionLine)
            .where(TransactionLine.item_id == item_id)
        )
        if line_count:
            raise InvalidStateError(
                f"Item '{item_id}' is referenced by {line_count} transaction line(s)"
            )
        await db.delete(item)
