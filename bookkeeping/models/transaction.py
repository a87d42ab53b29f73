import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column
from bookkeeping.models.base import Base, TimestampMixin


class TransactionType(str, PyEnum):
    """Transaction direction"""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, PyEnum):
    """Review state set by an accountant"""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Transaction(Base, TimestampMixin):
    """
    Income or expense recorded against a business.

    Amount is always positive; the direction comes from `type`.
    `created_by` is the owning user for ownership checks.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TransactionStatus.PENDING,
    )
    approved_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )

    # Composite indexes for common queries
    __table_args__ = (
        Index("ix_transactions_business_date", "business_id", "date"),
        Index("ix_transactions_business_category", "business_id", "category"),
    )
