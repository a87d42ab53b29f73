"""Business membership model linking users to businesses."""

from sqlalchemy import Integer, String, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from bookkeeping.models.base import Base, TimestampMixin
from bookkeeping.models.role import BusinessRole

if TYPE_CHECKING:
    from bookkeeping.models.user import User
    from bookkeeping.models.business import Business


class BusinessMember(Base, TimestampMixin):
    """
    Join table linking users to businesses with a business role.

    Example memberships:
    - Client "Alice" is OWNER of "Alice's Bakery"
    - Accountant "Bob" is MEMBER of "Alice's Bakery" (assigned client)
    - Accountant "Bob" is MEMBER of "Acme Corp" (another client)

    Constraints:
    - Unique(business_id, user_id) - one membership per user per business
    - The business owner always holds an OWNER membership
    """

    __tablename__ = "business_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[BusinessRole] = mapped_column(
        Enum(BusinessRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=BusinessRole.MEMBER,
    )

    # Relationships
    business: Mapped["Business"] = relationship("Business", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    # Constraints
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="uq_business_user"),
    )

    def __repr__(self) -> str:
        return f"<BusinessMember(business_id={self.business_id}, user_id={self.user_id}, role={self.role.value})>"
