"""Receipt service module.

Builds the printable summary of a closed transaction. Sending it to a
printer is left to whatever consumes the text.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.exceptions.pos_exception import InvalidStateError
from tabpos.models.transaction import TransactionStatus
from tabpos.services.transaction_service import get_transaction_details
from tabpos.settings import settings


class ReceiptLine(BaseModel):
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class Receipt(BaseModel):
    """Everything that goes on a printed receipt."""

    transaction_id: UUID
    customer_name: Optional[str] = None
    lines: list[ReceiptLine]
    total: Decimal
    paid_amount: Decimal
    change_amount: Decimal


async def build_receipt(db: AsyncSession, transaction_id: UUID) -> Receipt:
    """Collect receipt data for a closed transaction."""
    transaction, details = await get_transaction_details(db, transaction_id)
    if transaction.status != TransactionStatus.CLOSED:
        raise InvalidStateError(
            f"Receipts are only available for closed transactions, "
            f"'{transaction_id}' is {transaction.status.value}"
        )

    return Receipt(
        transaction_id=transaction.id,
        customer_name=transaction.customer_name,
        lines=[
            ReceiptLine(
                name=d.item_name,
                quantity=d.quantity,
                unit_price=d.unit_price,
                total_price=d.total_price,
            )
            for d in details
        ],
        total=transaction.total,
        paid_amount=transaction.paid_amount,
        change_amount=transaction.change_amount,
    )


def render_receipt(receipt: Receipt, width: Optional[int] = None) -> str:
    """Lay out a receipt as fixed-width text."""
    width = width or settings.RECEIPT_WIDTH
    rule = "-" * width
    name_width = max(width - 28, 8)

    rows = ["RECEIPT".center(width).rstrip(), rule]
    if receipt.customer_name:
        rows.append(receipt.customer_name[:width])
    for line in receipt.lines:
        rows.append(
            f"{line.name[:name_width]:<{name_width}} {line.quantity:>2} x {line.unit_price:>18.2f}"
        )
    rows.append(rule)
    rows.append(f"TOTAL: {receipt.total:>{width - 13}.2f}")
    rows.append(rule)
    rows.append("")
    rows.append(f"Paid: {receipt.paid_amount:.2f}")
    rows.append(f"Change: {receipt.change_amount:.2f}")
    return "\n".join(rows) + "\n"
