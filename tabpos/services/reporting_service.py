"""Reporting service module.

Aggregates closed transactions into sales reports.

Selection:
- status = closed
- closed_at within [start, end], inclusive at both ends

Cancelled and open transactions never contribute, not even through their
lines. All rows come from one SELECT so a report reflects a single point in
time; nothing is cached.
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.exceptions.pos_exception import InvalidInputError
from tabpos.models.transaction import Transaction, TransactionLine, TransactionStatus
from tabpos.schemas.report import ItemSalesReport, SalesReport
from tabpos.services.catalog_service import get_items_with_category
from tabpos.time_utils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")

DAILY_WINDOW = timedelta(hours=24)
MONTHLY_WINDOW = timedelta(days=30)


def _new_bucket() -> dict:
    return {"quantity": 0, "revenue": ZERO, "unit_prices": [], "transactions": set()}


def _aggregate_rows(rows) -> tuple[dict[UUID, Decimal], dict[UUID, dict]]:
    """
    Fold (transaction, line) rows into per-transaction totals and per-item buckets.

    Closed transactions without lines appear once with null line columns.
    """
    totals: dict[UUID, Decimal] = {}
    buckets: dict[UUID, dict] = defaultdict(_new_bucket)

    for row in rows:
        totals[row.transaction_id] = Decimal(row.total)
        if row.item_id is None:
            continue
        bucket = buckets[row.item_id]
        bucket["quantity"] += row.quantity
        bucket["revenue"] += Decimal(row.total_price)
        bucket["unit_prices"].append(Decimal(row.unit_price))
        bucket["transactions"].add(row.transaction_id)

    return totals, buckets


def _sort_items(items: list[ItemSalesReport]) -> list[ItemSalesReport]:
    """Revenue descending, ties by item id ascending."""
    by_id = sorted(items, key=lambda i: str(i.item_id))
    return sorted(by_id, key=lambda i: i.total_revenue, reverse=True)


def _top_item(items: list[ItemSalesReport], key) -> Optional[str]:
    if not items:
        return None
    # first wins on ties, following the deterministic item order
    best = items[0]
    for item in items[1:]:
        if key(item) > key(best):
            best = item
    return best.item_name


async def generate_report(
    db: AsyncSession,
    start_time: datetime,
    end_time: datetime,
) -> SalesReport:
    """
    Build a sales report for closed transactions in [start_time, end_time].

    Args:
        db: Database session
        start_time: Window start (inclusive)
        end_time: Window end (inclusive)

    Returns:
        SalesReport with totals and a per-item breakdown

    Raises:
        InvalidInputError: if start_time is after end_time
    """
    start = to_naive_utc(start_time)
    end = to_naive_utc(end_time)
    if start > end:
        raise InvalidInputError("Report start must not be after its end")

    query = (
        select(
            Transaction.id.label("transaction_id"),
            Transaction.total,
            TransactionLine.item_id,
            TransactionLine.quantity,
            TransactionLine.unit_price,
            TransactionLine.total_price,
        )
        .outerjoin(TransactionLine, TransactionLine.transaction_id == Transaction.id)
        .where(
            Transaction.status == TransactionStatus.CLOSED,
            Transaction.closed_at >= start,
            Transaction.closed_at <= end,
        )
    )
    result = await db.execute(query)
    totals, buckets = _aggregate_rows(result.all())

    names = await get_items_with_category(db, buckets.keys())

    items = []
    for item_id, bucket in buckets.items():
        item_name, category_name = names.get(item_id, (str(item_id), None))
        unit_prices = bucket["unit_prices"]
        items.append(ItemSalesReport(
            item_id=item_id,
            item_name=item_name,
            category_name=category_name,
            quantity_sold=bucket["quantity"],
            total_revenue=bucket["revenue"].quantize(CENTS),
            average_price=(sum(unit_prices, ZERO) / len(unit_prices)).quantize(CENTS),
            transaction_count=len(bucket["transactions"]),
        ))
    items = _sort_items(items)

    transaction_count = len(totals)
    total_revenue = sum(totals.values(), ZERO).quantize(CENTS)
    average_transaction_value = (
        (total_revenue / transaction_count).quantize(CENTS) if transaction_count else ZERO
    )

    logger.debug(
        "Report %s..%s: %d transaction(s), revenue %s",
        start, end, transaction_count, total_revenue,
    )

    return SalesReport(
        start_date=start,
        end_date=end,
        total_revenue=total_revenue,
        transaction_count=transaction_count,
        total_items_sold=sum(i.quantity_sold for i in items),
        average_transaction_value=average_transaction_value,
        top_selling_item=_top_item(items, key=lambda i: i.quantity_sold),
        top_revenue_item=_top_item(items, key=lambda i: i.total_revenue),
        items=items,
    )


async def daily_report(db: AsyncSession, now: Optional[datetime] = None) -> SalesReport:
    """Report over the last day, ending now."""
    end = now or utcnow()
    return await generate_report(db, end - DAILY_WINDOW, end)


async def monthly_report(db: AsyncSession, now: Optional[datetime] = None) -> SalesReport:
    """Report over the last 30 days, ending now."""
    end = now or utcnow()
    return await generate_report(db, end - MONTHLY_WINDOW, end)
