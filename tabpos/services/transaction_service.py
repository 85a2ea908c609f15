"""Transaction service module.

Implements the tab lifecycle:

    open --close--> closed
    open --cancel--> cancelled

Closed and cancelled are terminal. Every mutation runs as a single unit of
work that locks the transaction row and writes state changes through an
UPDATE guarded by ``status = 'open'``. A guard that matches no row means
another request already moved the tab out of the open state, and the whole
unit is rolled back with InvalidStateError.
"""
import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.exceptions.pos_exception import (
    InsufficientPaymentError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from tabpos.models.transaction import Transaction, TransactionLine, TransactionStatus
from tabpos.schemas.transaction import TransactionLineDetail
from tabpos.services.catalog_service import get_item, get_items_with_category
from tabpos.services.concurrency import atomic, lock_for_update
from tabpos.time_utils import utcnow

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")

# Largest values the Integer and Numeric(10, 2) columns hold
MAX_QUANTITY = 2**31 - 1
MAX_AMOUNT = Decimal("99999999.99")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS)


def _line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Validate a line quantity and price it."""
    if quantity < 1:
        raise InvalidInputError(f"Quantity must be at least 1, got {quantity}")
    if quantity > MAX_QUANTITY:
        raise InvalidInputError(f"Quantity must be at most {MAX_QUANTITY}, got {quantity}")
    total_price = _money(unit_price) * quantity
    if total_price > MAX_AMOUNT:
        raise InvalidInputError(f"Line total {total_price} exceeds {MAX_AMOUNT}")
    return total_price


async def _get_transaction(
    db: AsyncSession,
    transaction_id: UUID,
    for_update: bool = False,
) -> Transaction:
    query = select(Transaction).where(Transaction.id == transaction_id)
    if for_update:
        query = lock_for_update(query)
    # populate_existing so a locked read never returns a stale identity-map copy
    result = await db.execute(query.execution_options(populate_existing=True))
    transaction = result.scalar_one_or_none()
    if transaction is None:
        raise NotFoundError(f"Transaction '{transaction_id}' not found")
    return transaction


def _ensure_open(transaction: Transaction) -> None:
    if transaction.status != TransactionStatus.OPEN:
        raise InvalidStateError(
            f"Transaction '{transaction.id}' is {transaction.status.value}, not open"
        )


async def _guarded_update(
    db: AsyncSession,
    transaction_id: UUID,
    expected_total: Optional[Decimal] = None,
    **values,
) -> None:
    """
    Write values only if the transaction is still open.

    With expected_total, the row must also still carry that total, so a
    settlement computed from a stale read never lands.
    """
    conditions = [
        Transaction.id == transaction_id,
        Transaction.status == TransactionStatus.OPEN,
    ]
    if expected_total is not None:
        conditions.append(Transaction.total == expected_total)

    result = await db.execute(
        update(Transaction)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateError(
            f"Transaction '{transaction_id}' is no longer open or changed concurrently"
        )


async def _recompute_total(db: AsyncSession, transaction_id: UUID) -> Decimal:
    """Store the sum of the remaining lines as the transaction total."""
    result = await db.execute(
        select(TransactionLine.total_price).where(
            TransactionLine.transaction_id == transaction_id
        )
    )
    total = sum((_money(price) for price in result.scalars().all()), ZERO)
    if total > MAX_AMOUNT:
        raise InvalidInputError(f"Transaction total {total} exceeds {MAX_AMOUNT}")
    await _guarded_update(db, transaction_id, total=total, updated_at=utcnow())
    return total


# --- Lifecycle ---


async def create_transaction(
    db: AsyncSession,
    customer_name: Optional[str] = None,
) -> Transaction:
    """Open a new, empty transaction."""
    now = utcnow()
    transaction = Transaction(
        customer_name=customer_name,
        status=TransactionStatus.OPEN,
        total=ZERO,
        created_at=now,
        updated_at=now,
    )
    async with atomic(db):
        db.add(transaction)
    await db.refresh(transaction)
    logger.info("Opened transaction %s for %r", transaction.id, customer_name)
    return transaction


async def add_line(
    db: AsyncSession,
    transaction_id: UUID,
    item_id: UUID,
    quantity: int,
) -> TransactionLine:
    """
    Add an item to an open transaction.

    The line keeps the item's price as of now; later catalog price changes
    do not affect it. Adding an item that is already on the tab creates a
    second, independent line.

    Raises:
        NotFoundError: transaction or item missing
        InvalidStateError: transaction not open
        InvalidInputError: quantity below 1 or too large for the store,
            or item out of stock
    """
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)
        if quantity < 1:
            raise InvalidInputError(f"Quantity must be at least 1, got {quantity}")

        item = await get_item(db, item_id)
        if not item.in_stock:
            raise InvalidInputError(f"Item '{item.name}' is out of stock")

        unit_price = _money(item.price)
        line = TransactionLine(
            transaction_id=transaction_id,
            item_id=item_id,
            quantity=quantity,
            unit_price=unit_price,
            total_price=_line_total(unit_price, quantity),
            created_at=utcnow(),
        )
        db.add(line)
        await db.flush()
        total = await _recompute_total(db, transaction_id)

    await db.refresh(line)
    logger.debug(
        "Added %d x %s to transaction %s, total now %s",
        quantity, item_id, transaction_id, total,
    )
    return line


async def remove_line(
    db: AsyncSession,
    transaction_id: UUID,
    line_id: UUID,
) -> Transaction:
    """
    Remove a line from an open transaction.

    Raises:
        NotFoundError: transaction missing, or line not on this transaction
        InvalidStateError: transaction not open
    """
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)

        result = await db.execute(
            delete(TransactionLine)
            .where(
                TransactionLine.id == line_id,
                TransactionLine.transaction_id == transaction_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(
                f"Line '{line_id}' not found on transaction '{transaction_id}'"
            )
        total = await _recompute_total(db, transaction_id)

    await db.refresh(transaction)
    logger.debug("Removed line %s from transaction %s, total now %s", line_id, transaction_id, total)
    return transaction


async def update_line_quantity(
    db: AsyncSession,
    transaction_id: UUID,
    line_id: UUID,
    quantity: int,
) -> TransactionLine:
    """
    Change the quantity of a line on an open transaction.

    The line keeps the unit price it was added at; only the line total and
    the transaction total are recomputed.

    Raises:
        NotFoundError: transaction missing, or line not on this transaction
        InvalidStateError: transaction not open
        InvalidInputError: quantity below 1 or too large for the store
    """
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)

        result = await db.execute(
            select(TransactionLine)
            .where(
                TransactionLine.id == line_id,
                TransactionLine.transaction_id == transaction_id,
            )
            .execution_options(populate_existing=True)
        )
        line = result.scalar_one_or_none()
        if line is None:
            raise NotFoundError(
                f"Line '{line_id}' not found on transaction '{transaction_id}'"
            )

        line.total_price = _line_total(line.unit_price, quantity)
        line.quantity = quantity
        await db.flush()
        total = await _recompute_total(db, transaction_id)

    await db.refresh(line)
    logger.debug(
        "Set line %s on transaction %s to %d, total now %s",
        line_id, transaction_id, quantity, total,
    )
    return line


async def close_transaction(
    db: AsyncSession,
    transaction_id: UUID,
    paid_amount: Decimal,
) -> Transaction:
    """
    Settle an open transaction.

    Sets status, paid amount, change and closed_at in one UPDATE, so a
    reader can never see a closed tab without its settlement. The UPDATE
    only matches while the stored total is still the one the change was
    computed from.

    Raises:
        NotFoundError: transaction missing
        InvalidStateError: transaction not open, or changed while closing
        InsufficientPaymentError: paid_amount below the total
        InvalidInputError: paid_amount not a whole number of cents
    """
    paid = Decimal(paid_amount)
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)

        total = _money(transaction.total)
        if paid < total:
            raise InsufficientPaymentError(
                f"Paid amount {paid} is less than the total {total}"
            )
        if paid > MAX_AMOUNT:
            raise InvalidInputError(f"Paid amount {paid} exceeds {MAX_AMOUNT}")
        if paid != paid.quantize(CENTS):
            raise InvalidInputError(f"Paid amount {paid} has more than two decimal places")
        paid = paid.quantize(CENTS)

        now = utcnow()
        await _guarded_update(
            db,
            transaction_id,
            expected_total=total,
            status=TransactionStatus.CLOSED,
            paid_amount=paid,
            change_amount=paid - total,
            closed_at=now,
            updated_at=now,
        )

    await db.refresh(transaction)
    logger.info(
        "Closed transaction %s: total %s, paid %s, change %s",
        transaction_id, transaction.total, transaction.paid_amount, transaction.change_amount,
    )
    return transaction


async def cancel_transaction(db: AsyncSession, transaction_id: UUID) -> Transaction:
    """
    Cancel an open transaction. No settlement is recorded.

    Raises:
        NotFoundError: transaction missing
        InvalidStateError: transaction not open
    """
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)
        now = utcnow()
        await _guarded_update(
            db,
            transaction_id,
            status=TransactionStatus.CANCELLED,
            closed_at=now,
            updated_at=now,
        )

    await db.refresh(transaction)
    logger.info("Cancelled transaction %s", transaction_id)
    return transaction


async def update_customer_name(
    db: AsyncSession,
    transaction_id: UUID,
    customer_name: Optional[str],
) -> Transaction:
    """Rename an open transaction."""
    async with atomic(db):
        transaction = await _get_transaction(db, transaction_id, for_update=True)
        _ensure_open(transaction)
        await _guarded_update(
            db, transaction_id, customer_name=customer_name, updated_at=utcnow()
        )

    await db.refresh(transaction)
    return transaction


# --- Reads ---


async def get_transaction(db: AsyncSession, transaction_id: UUID) -> Transaction:
    """Get a transaction by ID."""
    return await _get_transaction(db, transaction_id)


async def get_open_transactions(db: AsyncSession) -> list[Transaction]:
    """All open transactions, oldest first."""
    query = (
        select(Transaction)
        .where(Transaction.status == TransactionStatus.OPEN)
        .order_by(Transaction.created_at.asc(), Transaction.id.asc())
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_transactions(db: AsyncSession) -> list[Transaction]:
    """All transactions, newest first."""
    result = await db.execute(
        select(Transaction).order_by(Transaction.created_at.desc(), Transaction.id.desc())
    )
    return list(result.scalars().all())


async def get_transaction_lines(db: AsyncSession, transaction_id: UUID) -> list[TransactionLine]:
    """Lines of a transaction in the order they were added."""
    result = await db.execute(
        select(TransactionLine)
        .where(TransactionLine.transaction_id == transaction_id)
        .order_by(TransactionLine.created_at.asc(), TransactionLine.id.asc())
    )
    return list(result.scalars().all())


async def get_transaction_details(
    db: AsyncSession,
    transaction_id: UUID,
) -> tuple[Transaction, list[TransactionLineDetail]]:
    """Transaction plus its lines, each joined with the catalog item name."""
    transaction = await _get_transaction(db, transaction_id)
    lines = await get_transaction_lines(db, transaction_id)
    names = await get_items_with_category(db, {line.item_id for line in lines})

    details = [
        TransactionLineDetail(
            id=line.id,
            item_id=line.item_id,
            item_name=names.get(line.item_id, (str(line.item_id), None))[0],
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.total_price,
        )
        for line in lines
    ]
    return transaction, details
