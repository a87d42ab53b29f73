"""Per-request access context for authorization decisions."""

from dataclasses import dataclass, field, replace

from bookkeeping.models.role import BusinessRole, Role, SubscriptionTier


@dataclass(frozen=True)
class RecordOwnership:
    """
    Ownership data of a single record being accessed.

    Attributes:
        owner_id: User who created or owns the record
        business_id: Business the record belongs to
    """

    owner_id: str | None = None
    business_id: int | None = None


@dataclass(frozen=True)
class AccessContext:
    """
    Everything the access decider needs to know about the requester.

    Assembled by the caller from the user row and business-membership rows
    fetched out of the database, and valid for a single decision. The
    current business is an explicit value here rather than ambient state.

    Attributes:
        user_id: Authenticated user ID (None when anonymous)
        user_role: Platform role (None means unauthenticated)
        business_role: Role within the current business, if a member
        is_owner: Whether the user owns the current business
        business_id: Current business ID, if one is selected
        subscription_tier: Plan of the current business
        user_business_ids: Every business the user belongs to
    """

    user_id: str | None = None
    user_role: Role | None = None
    business_role: BusinessRole | None = None
    is_owner: bool = False
    business_id: int | None = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    user_business_ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "AccessContext":
        """Context for a request that carries no identity."""
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_role is not None

    def is_admin(self) -> bool:
        """Check if user is a platform admin."""
        return self.user_role == Role.ADMIN

    def is_accountant(self) -> bool:
        """Check if user is an accountant."""
        return self.user_role == Role.ACCOUNTANT

    def is_member_of(self, business_id: int | None) -> bool:
        """Check if user belongs to the given business."""
        return business_id is not None and business_id in self.user_business_ids

    def for_record(self, ownership: RecordOwnership | None) -> "AccessContext":
        """
        Context to decide on a specific record.

        is_owner describes the current business only, so it is dropped when
        the record belongs to another business or to no business at all.
        """
        if not self.is_owner or ownership is None:
            return self
        if ownership.business_id is not None and ownership.business_id == self.business_id:
            return self
        return replace(self, is_owner=False)

    def __repr__(self) -> str:
        role = self.user_role.value if self.user_role else None
        return (
            f"<AccessContext(user_id={self.user_id}, role={role}, "
            f"business_id={self.business_id}, tier={self.subscription_tier.value})>"
        )
