"""Transaction models module."""
import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tabpos.database.database import Base
from tabpos.time_utils import utcnow


class TransactionStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class Transaction(Base):
    """A customer tab.

    paid_amount and change_amount only exist on closed transactions, and
    closed_at only on terminal ones; the table constraint below holds the
    store to that.
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_name: Mapped[str] = mapped_column(String(256), nullable=True, index=True)
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(
            TransactionStatus,
            name="transaction_status",
            native_enum=False,
            create_constraint=True,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=TransactionStatus.OPEN,
        index=True,
    )
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=True)
    change_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    closed_at: Mapped[datetime] = mapped_column(DateTime, nullable=True, index=True)

    lines: Mapped[list["TransactionLine"]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint(
            "(status = 'open' AND paid_amount IS NULL AND change_amount IS NULL"
            " AND closed_at IS NULL)"
            " OR (status = 'closed' AND paid_amount IS NOT NULL"
            " AND change_amount IS NOT NULL AND closed_at IS NOT NULL)"
            " OR (status = 'cancelled' AND paid_amount IS NULL"
            " AND change_amount IS NULL AND closed_at IS NOT NULL)",
            name="ck_transactions_settlement",
        ),
        CheckConstraint("total >= 0", name="ck_transactions_total_non_negative"),
    )


class TransactionLine(Base):
    """One item/quantity entry on a transaction, priced at the moment it was added."""

    __tablename__ = "transaction_lines"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("items.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    transaction: Mapped[Transaction] = relationship(back_populates="lines", lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_transaction_lines_quantity_positive"),
    )
