"""Business model, the isolation boundary for bookkeeping data."""

from sqlalchemy import String, Integer, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from bookkeeping.models.base import Base, TimestampMixin
from bookkeeping.models.role import SubscriptionTier

if TYPE_CHECKING:
    from bookkeeping.models.business_member import BusinessMember


class Business(Base, TimestampMixin):
    """
    A business whose books are kept in the system.

    Transactions, reports, documents and tasks all belong to a business.
    Users reach that data through memberships (owner or member); the
    subscription tier of the business gates plan features.
    """

    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    business_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    subscription_tier: Mapped[SubscriptionTier | None] = mapped_column(
        Enum(
            SubscriptionTier,
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=True,
    )

    # Relationships
    members: Mapped[list["BusinessMember"]] = relationship(
        "BusinessMember",
        back_populates="business",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, name='{self.name}')>"
