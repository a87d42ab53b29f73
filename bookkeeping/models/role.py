"""Enumerations used by role-based access control."""

from enum import Enum as PyEnum


class Role(str, PyEnum):
    """
    Platform-wide role attached to a user record.

    Roles:
    - CLIENT - Manages their own businesses, transactions, goals and documents
    - ACCOUNTANT - Works on the books of the businesses they are a member of
    - ADMIN - Platform operator, bypasses the rule table

    Set at account creation and mutable only by an admin.
    """

    CLIENT = "client"
    ACCOUNTANT = "accountant"
    ADMIN = "admin"

    @classmethod
    def from_label(cls, label: str | None) -> "Role | None":
        """
        Read a role label as stored in the users table.

        Older rows use "user" for clients and some views label accountants
        as "consultant"; both fold into their canonical role. Unknown or
        missing labels yield None, which the access decider treats as
        unauthenticated.
        """
        if label is None:
            return None
        if isinstance(label, cls):
            return label
        normalized = str(label).strip().lower()
        normalized = ROLE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


ROLE_ALIASES = {
    "user": Role.CLIENT.value,
    "consultant": Role.ACCOUNTANT.value,
}


class BusinessRole(str, PyEnum):
    """Relationship between a user and a business they belong to."""

    OWNER = "owner"
    MEMBER = "member"


class Action(str, PyEnum):
    """Action verbs that can be performed on a resource."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    EXPORT = "export"


class Resource(str, PyEnum):
    """Protected entity types."""

    BUSINESS = "business"
    TRANSACTION = "transaction"
    REPORT = "report"
    TASK = "task"
    USER = "user"
    DOCUMENT = "document"
    GOAL = "goal"


class SubscriptionTier(str, PyEnum):
    """
    Subscription plan levels, totally ordered.

    FREE < BASIC < PREMIUM < ENTERPRISE. Higher tiers inherit every feature
    of the lower ones. Comparisons use the plan rank, not string order.
    """

    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self.value]

    @classmethod
    def parse(cls, value: "str | SubscriptionTier | None") -> "SubscriptionTier":
        """Read a tier value, falling back to FREE for missing or unknown plans."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.FREE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.FREE

    def __lt__(self, other):
        if not isinstance(other, SubscriptionTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, SubscriptionTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, SubscriptionTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, SubscriptionTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_RANK = {"free": 0, "basic": 1, "premium": 2, "enterprise": 3}


class RuleEffect(str, PyEnum):
    """Outcome stored in the access rule table."""

    ALLOW = "allow"
    DENY = "deny"
    ALLOW_IF_OWNER = "allow_if_owner"


class Decision(str, PyEnum):
    """
    Result of an access check.

    DENY_UNAUTHENTICATED is kept distinct from DENY so callers can send the
    user to a login flow instead of showing a "forbidden" message.
    """

    ALLOW = "allow"
    DENY = "deny"
    DENY_UNAUTHENTICATED = "deny_unauthenticated"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW

    def __bool__(self) -> bool:
        return self is Decision.ALLOW
