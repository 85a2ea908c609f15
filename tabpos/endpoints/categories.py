"""Category CRUD endpoints module."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.database.database import get_db
from tabpos.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from tabpos.services import catalog_service

router = APIRouter(prefix="/api/categories", tags=["catalog"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[CategoryResponse]:
    """List all categories ordered by name."""
    categories = await catalog_service.list_categories(db)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    """Create a category."""
    category = await catalog_service.create_category(db, data)
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    """Get a single category by ID."""
    category = await catalog_service.get_category(db, category_id)
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    """Update a category by ID."""
    category = await catalog_service.update_category(db, category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a category by ID.

    Categories that still hold items cannot be deleted.
    """
    await catalog_service.delete_category(db, category_id)
