"""Catalog schemas module for CRUD operations."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=128, description="Category name")
    description: Optional[str] = Field(None, description="Optional description")


class CategoryUpdate(BaseModel):
    """Schema for updating a category (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    """Schema for category response."""

    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ItemBase(BaseModel):
    """Base item schema with common fields."""

    name: str = Field(..., min_length=1, max_length=256, description="Item name")
    description: Optional[str] = Field(None, description="Optional description")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Current unit price")
    category_id: UUID = Field(..., description="Owning category")
    sku: Optional[str] = Field(None, max_length=64, description="Stock keeping unit")


class ItemCreate(ItemBase):
    """Schema for creating an item."""

    in_stock: bool = Field(True, description="Whether the item can be sold")


class ItemUpdate(BaseModel):
    """Schema for updating an item (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=256)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category_id: Optional[UUID] = None
    sku: Optional[str] = Field(None, max_length=64)
    in_stock: Optional[bool] = None


class ItemResponse(ItemBase):
    """Schema for item response."""

    id: UUID = Field(..., description="Item ID")
    in_stock: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
