"""Transaction schemas module.

A transaction is serialized as a tagged variant on ``status``: only the
closed variant has settlement fields, so an open tab cannot expose a paid
amount or change.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from tabpos.models.transaction import Transaction, TransactionStatus


class TransactionCreate(BaseModel):
    """Schema for opening a transaction."""

    customer_name: Optional[str] = Field(None, max_length=256, description="Optional tab label")


class TransactionUpdate(BaseModel):
    """Schema for renaming an open transaction."""

    customer_name: Optional[str] = Field(None, max_length=256, description="New tab label")


class AddLineRequest(BaseModel):
    """Schema for adding an item to a transaction."""

    item_id: UUID = Field(..., description="Catalog item to sell")
    quantity: int = Field(..., description="Units sold (must be at least 1)")


class UpdateLineRequest(BaseModel):
    """Schema for changing the quantity of a line."""

    quantity: int = Field(..., description="New units sold (must be at least 1)")


class CloseTransactionRequest(BaseModel):
    """Schema for settling a transaction."""

    paid_amount: Decimal = Field(..., decimal_places=2, description="Amount tendered")


class _TransactionBase(BaseModel):
    id: UUID = Field(..., description="Transaction ID")
    customer_name: Optional[str] = None
    total: Decimal = Field(..., description="Sum of line totals")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OpenTransactionResponse(_TransactionBase):
    """A transaction still accepting lines."""

    status: Literal[TransactionStatus.OPEN]


class ClosedTransactionResponse(_TransactionBase):
    """A settled transaction."""

    status: Literal[TransactionStatus.CLOSED]
    paid_amount: Decimal
    change_amount: Decimal
    closed_at: datetime


class CancelledTransactionResponse(_TransactionBase):
    """A transaction abandoned before settlement."""

    status: Literal[TransactionStatus.CANCELLED]
    closed_at: datetime


TransactionResponse = Annotated[
    Union[OpenTransactionResponse, ClosedTransactionResponse, CancelledTransactionResponse],
    Field(discriminator="status"),
]

_RESPONSE_BY_STATUS = {
    TransactionStatus.OPEN: OpenTransactionResponse,
    TransactionStatus.CLOSED: ClosedTransactionResponse,
    TransactionStatus.CANCELLED: CancelledTransactionResponse,
}


def to_transaction_response(
    transaction: Transaction,
) -> Union[OpenTransactionResponse, ClosedTransactionResponse, CancelledTransactionResponse]:
    """Build the status-specific response model for an ORM transaction."""
    return _RESPONSE_BY_STATUS[transaction.status].model_validate(transaction)


class TransactionLineResponse(BaseModel):
    """Schema for a stored transaction line."""

    id: UUID
    transaction_id: UUID
    item_id: UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class LineChangeResponse(TransactionLineResponse):
    """Added or changed line together with the recomputed tab total."""

    transaction_total: Decimal = Field(..., description="Transaction total after the change")


class TransactionLineDetail(BaseModel):
    """Line joined with its catalog item name."""

    id: UUID
    item_id: UUID
    item_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class TransactionDetailsResponse(BaseModel):
    """Transaction with all of its lines."""

    transaction: TransactionResponse
    items: list[TransactionLineDetail] = Field(default_factory=list)


class CloseTransactionResponse(BaseModel):
    """Result of closing a transaction."""

    transaction: ClosedTransactionResponse
    change_amount: Decimal
