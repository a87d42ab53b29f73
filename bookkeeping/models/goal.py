from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column
from bookkeeping.models.base import Base, TimestampMixin


class GoalPriority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalStatus(str, PyEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class Goal(Base, TimestampMixin):
    """
    Savings goal owned by a user, optionally tied to one of their businesses.

    Status moves to COMPLETED once current_amount reaches target_amount.
    """

    __tablename__ = "financial_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    business_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("businesses.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="savings")
    target_amount: Mapped[float] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    current_amount: Mapped[float] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False, default=0
    )
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    priority: Mapped[GoalPriority] = mapped_column(
        Enum(GoalPriority, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=GoalPriority.MEDIUM,
    )
    status: Mapped[GoalStatus] = mapped_column(
        Enum(GoalStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=GoalStatus.ACTIVE,
        index=True,
    )

    @property
    def progress(self) -> float:
        """Fraction of the target saved so far, capped at 1.0"""
        target = float(self.target_amount or 0)
        if target <= 0:
            return 0.0
        return min(float(self.current_amount or 0) / target, 1.0)
