from sqlalchemy import String, Boolean, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from bookkeeping.models.base import Base, TimestampMixin
from bookkeeping.models.role import Role

if TYPE_CHECKING:
    from bookkeeping.models.business_member import BusinessMember


class User(Base, TimestampMixin):
    """
    Profile row for a user of the hosted auth service.

    The primary key is the auth user ID (the 'sub' claim of the JWT); no
    credentials are stored here. Auto-created as a CLIENT on the first API
    request with a valid token.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=Role.CLIENT,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    memberships: Mapped[list["BusinessMember"]] = relationship(
        "BusinessMember",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role.value})>"
