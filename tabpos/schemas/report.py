"""Report schemas module."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReportDateRange(BaseModel):
    """Request schema for an arbitrary report window."""

    start_date: datetime = Field(..., description="Window start (inclusive)")
    end_date: datetime = Field(..., description="Window end (inclusive)")


class ItemSalesReport(BaseModel):
    """Per-item aggregate over the closed transactions in a window."""

    item_id: UUID
    item_name: str
    category_name: Optional[str] = None
    quantity_sold: int = Field(..., description="Units sold across all lines")
    total_revenue: Decimal = Field(..., description="Sum of line totals")
    average_price: Decimal = Field(..., description="Average snapshotted unit price")
    transaction_count: int = Field(..., description="Distinct transactions containing the item")


class SalesReport(BaseModel):
    """Sales summary for a report window."""

    start_date: datetime
    end_date: datetime
    total_revenue: Decimal = Field(..., description="Sum of closed transaction totals")
    transaction_count: int = Field(..., description="Number of closed transactions")
    total_items_sold: int
    average_transaction_value: Decimal
    top_selling_item: Optional[str] = Field(None, description="Item with most units sold")
    top_revenue_item: Optional[str] = Field(None, description="Item with the highest revenue")
    items: list[ItemSalesReport] = Field(default_factory=list)
