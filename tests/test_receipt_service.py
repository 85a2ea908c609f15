"""Tests for receipt building and rendering."""
import uuid
from decimal import Decimal

import pytest

from tabpos.exceptions.pos_exception import InvalidStateError, NotFoundError
from tabpos.services.receipt_service import Receipt, ReceiptLine, build_receipt, render_receipt
from tabpos.services.transaction_service import (
    add_line,
    cancel_transaction,
    close_transaction,
    create_transaction,
)


def _receipt(**overrides) -> Receipt:
    values = dict(
        transaction_id=uuid.uuid4(),
        customer_name="Jane",
        lines=[
            ReceiptLine(
                name="Coffee", quantity=2, unit_price=Decimal("3.50"), total_price=Decimal("7.00")
            ),
            ReceiptLine(
                name="Water", quantity=1, unit_price=Decimal("1.00"), total_price=Decimal("1.00")
            ),
        ],
        total=Decimal("8.00"),
        paid_amount=Decimal("10.00"),
        change_amount=Decimal("2.00"),
    )
    values.update(overrides)
    return Receipt(**values)


@pytest.mark.asyncio
class TestBuildReceipt:
    """Tests for build_receipt."""

    async def test_closed_transaction(self, db_session, catalog):
        """Receipt carries item names, settlement and customer."""
        txn = await create_transaction(db_session, "Jane")
        await add_line(db_session, txn.id, catalog["coffee"].id, 2)
        await add_line(db_session, txn.id, catalog["water"].id, 1)
        await close_transaction(db_session, txn.id, Decimal("10.00"))

        receipt = await build_receipt(db_session, txn.id)

        assert receipt.customer_name == "Jane"
        assert [(l.name, l.quantity) for l in receipt.lines] == [("Coffee", 2), ("Water", 1)]
        assert receipt.total == Decimal("8.00")
        assert receipt.paid_amount == Decimal("10.00")
        assert receipt.change_amount == Decimal("2.00")

    async def test_open_transaction_rejected(self, db_session):
        """Open tabs have no receipt yet."""
        txn = await create_transaction(db_session)
        with pytest.raises(InvalidStateError):
            await build_receipt(db_session, txn.id)

    async def test_cancelled_transaction_rejected(self, db_session):
        """Cancelled tabs never get a receipt."""
        txn = await create_transaction(db_session)
        await cancel_transaction(db_session, txn.id)
        with pytest.raises(InvalidStateError):
            await build_receipt(db_session, txn.id)

    async def test_missing_transaction(self, db_session):
        with pytest.raises(NotFoundError):
            await build_receipt(db_session, uuid.uuid4())


class TestRenderReceipt:
    """Tests for render_receipt."""

    def test_layout(self):
        """Header, customer, one row per line, then totals and settlement."""
        rows = render_receipt(_receipt(), width=48).splitlines()

        assert rows[0].strip() == "RECEIPT"
        assert rows[1] == "-" * 48
        assert rows[2] == "Jane"
        assert rows[3].split() == ["Coffee", "2", "x", "3.50"]
        assert rows[4].split() == ["Water", "1", "x", "1.00"]
        assert rows[5] == "-" * 48
        assert rows[6].split() == ["TOTAL:", "8.00"]
        assert rows[-2] == "Paid: 10.00"
        assert rows[-1] == "Change: 2.00"

    def test_rows_fit_width(self):
        """Long item names are truncated to keep rows within the paper width."""
        long_name = ReceiptLine(
            name="Extra large caramel macchiato with oat milk",
            quantity=1,
            unit_price=Decimal("6.75"),
            total_price=Decimal("6.75"),
        )
        text = render_receipt(_receipt(lines=[long_name]), width=48)

        assert all(len(row) <= 48 for row in text.splitlines())
        assert "6.75" in text

    def test_no_customer_line_without_name(self):
        """Anonymous tabs skip the customer row."""
        rows = render_receipt(_receipt(customer_name=None), width=48).splitlines()
        assert rows[2].split()[0] == "Coffee"

    def test_ends_with_newline(self):
        assert render_receipt(_receipt()).endswith("Change: 2.00\n")
