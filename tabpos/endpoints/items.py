"""Item CRUD endpoints module."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.database.database import get_db
from tabpos.schemas.catalog import ItemCreate, ItemResponse, ItemUpdate
from tabpos.services import catalog_service

router = APIRouter(prefix="/api/items", tags=["catalog"])


@router.get("", response_model=list[ItemResponse])
async def list_items(db: AsyncSession = Depends(get_db)) -> list[ItemResponse]:
    """List all items ordered by name."""
    items = await catalog_service.list_items(db)
    return [ItemResponse.model_validate(i) for i in items]


@router.get("/category/{category_id}", response_model=list[ItemResponse])
async def list_items_by_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> list[ItemResponse]:
    """List the items of one category ordered by name."""
    items = await catalog_service.list_items(db, category_id=category_id)
    return [ItemResponse.model_validate(i) for i in items]


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    """
    Create an item.

    Required fields:
    - **name**: Item name
    - **price**: Current unit price
    - **category_id**: Existing category
    """
    item = await catalog_service.create_item(db, data)
    return ItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    """Get a single item by ID."""
    item = await catalog_service.get_item(db, item_id)
    return ItemResponse.model_validate(item)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: UUID,
    data: ItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> ItemResponse:
    """
    Update an item by ID.

    A new price applies to lines added afterwards only.
    """
    item = await catalog_service.update_item(db, item_id, data)
    return ItemResponse.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete an item that no transaction references."""
    await catalog_service.delete_item(db, item_id)
