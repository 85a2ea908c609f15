"""Transaction endpoints module.

Thin HTTP layer over the transaction service. Engine errors are raised as
APIException subclasses and rendered by the application handler.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.database.database import get_db
from tabpos.schemas.transaction import (
    AddLineRequest,
    CloseTransactionRequest,
    CloseTransactionResponse,
    LineChangeResponse,
    TransactionCreate,
    TransactionDetailsResponse,
    TransactionLineResponse,
    TransactionResponse,
    TransactionUpdate,
    UpdateLineRequest,
    to_transaction_response,
)
from tabpos.services import transaction_service
from tabpos.services.receipt_service import build_receipt, render_receipt

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(db: AsyncSession = Depends(get_db)):
    """List all transactions, newest first."""
    transactions = await transaction_service.list_transactions(db)
    return [to_transaction_response(t) for t in transactions]


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: TransactionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Open a new, empty transaction."""
    transaction = await transaction_service.create_transaction(db, data.customer_name)
    return to_transaction_response(transaction)


# Declared before /{transaction_id} so "open" is not parsed as an ID
@router.get("/open", response_model=list[TransactionResponse])
async def list_open_transactions(db: AsyncSession = Depends(get_db)):
    """List open transactions, oldest first."""
    transactions = await transaction_service.get_open_transactions(db)
    return [to_transaction_response(t) for t in transactions]


@router.get("/{transaction_id}", response_model=TransactionDetailsResponse)
async def get_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> TransactionDetailsResponse:
    """Get a transaction with its lines."""
    transaction, items = await transaction_service.get_transaction_details(db, transaction_id)
    return TransactionDetailsResponse(
        transaction=to_transaction_response(transaction),
        items=items,
    )


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: UUID,
    data: TransactionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Rename an open transaction."""
    transaction = await transaction_service.update_customer_name(
        db, transaction_id, data.customer_name
    )
    return to_transaction_response(transaction)


@router.post(
    "/{transaction_id}/items",
    response_model=LineChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_line(
    transaction_id: UUID,
    data: AddLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineChangeResponse:
    """
    Add an item to an open transaction.

    The item's current price is copied onto the line.
    """
    line = await transaction_service.add_line(db, transaction_id, data.item_id, data.quantity)
    transaction = await transaction_service.get_transaction(db, transaction_id)
    return LineChangeResponse(
        **TransactionLineResponse.model_validate(line).model_dump(),
        transaction_total=transaction.total,
    )


@router.put("/{transaction_id}/items/{line_id}", response_model=LineChangeResponse)
async def update_line(
    transaction_id: UUID,
    line_id: UUID,
    data: UpdateLineRequest,
    db: AsyncSession = Depends(get_db),
) -> LineChangeResponse:
    """Change a line's quantity; its unit price stays as added."""
    line = await transaction_service.update_line_quantity(
        db, transaction_id, line_id, data.quantity
    )
    transaction = await transaction_service.get_transaction(db, transaction_id)
    return LineChangeResponse(
        **TransactionLineResponse.model_validate(line).model_dump(),
        transaction_total=transaction.total,
    )


@router.delete("/{transaction_id}/items/{line_id}", response_model=TransactionResponse)
async def remove_line(
    transaction_id: UUID,
    line_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Remove a line from an open transaction."""
    transaction = await transaction_service.remove_line(db, transaction_id, line_id)
    return to_transaction_response(transaction)


@router.post("/{transaction_id}/close", response_model=CloseTransactionResponse)
async def close_transaction(
    transaction_id: UUID,
    data: CloseTransactionRequest,
    db: AsyncSession = Depends(get_db),
) -> CloseTransactionResponse:
    """
    Settle an open transaction.

    - **paid_amount**: must be at least the transaction total
    """
    transaction = await transaction_service.close_transaction(
        db, transaction_id, data.paid_amount
    )
    return CloseTransactionResponse(
        transaction=to_transaction_response(transaction),
        change_amount=transaction.change_amount,
    )


@router.post("/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Cancel an open transaction."""
    transaction = await transaction_service.cancel_transaction(db, transaction_id)
    return to_transaction_response(transaction)


@router.get("/{transaction_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> str:
    """Printable receipt text for a closed transaction."""
    receipt = await build_receipt(db, transaction_id)
    return render_receipt(receipt)
