"""Report endpoints module.

Provides sales reports over an arbitrary window and the daily/monthly
shortcuts.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.database.database import get_db
from tabpos.schemas.report import ReportDateRange, SalesReport
from tabpos.services.reporting_service import daily_report, generate_report, monthly_report

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/sales", response_model=SalesReport)
async def generate_sales_report(
    date_range: ReportDateRange,
    db: AsyncSession = Depends(get_db),
) -> SalesReport:
    """
    Sales report for closed transactions with closed_at in [start_date, end_date].

    Returns:
    - **total_revenue** / **transaction_count**: over closed transactions only
    - **items**: per-item quantity and revenue, highest revenue first
    """
    return await generate_report(db, date_range.start_date, date_range.end_date)


@router.get("/daily", response_model=SalesReport)
async def get_daily_report(db: AsyncSession = Depends(get_db)) -> SalesReport:
    """Sales report for the last 24 hours."""
    return await daily_report(db)


@router.get("/monthly", response_model=SalesReport)
async def get_monthly_report(db: AsyncSession = Depends(get_db)) -> SalesReport:
    """Sales report for the last 30 days."""
    return await monthly_report(db)
