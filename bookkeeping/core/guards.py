"""
Guard composition for protected operations.

A protected operation evaluates exactly one access decision before it
returns any protected data, and maps the result to one of three distinct
fallbacks:

- LOGIN_REQUIRED: no identity, prompt to log in (401)
- FORBIDDEN: identity present but not permitted (403)
- UPGRADE_REQUIRED: permitted, but the plan lacks the feature (402)
"""

from dataclasses import dataclass
from enum import Enum as PyEnum

from loguru import logger

from bookkeeping.core.access import (
    check_permission,
    has_subscription_feature,
    required_tier,
)
from bookkeeping.core.exceptions import (
    ForbiddenException,
    UnauthorizedException,
    UpgradeRequiredException,
)
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Action, Decision, Resource, SubscriptionTier

LOGIN_MESSAGE = "Please log in to access this feature"


class GuardOutcome(str, PyEnum):
    """What a protected region should render or return."""

    GRANTED = "granted"
    LOGIN_REQUIRED = "login_required"
    FORBIDDEN = "forbidden"
    UPGRADE_REQUIRED = "upgrade_required"


@dataclass(frozen=True)
class GuardResult:
    outcome: GuardOutcome
    message: str = ""
    feature: str | None = None

    @property
    def granted(self) -> bool:
        return self.outcome == GuardOutcome.GRANTED


def _upgrade_message(feature: str) -> str:
    tier = required_tier(feature)
    if tier is None:
        return f'The "{feature}" feature is not available on any plan'
    return f'The "{feature}" feature requires the {tier.value} plan or higher'


def evaluate_feature_guard(context: AccessContext | None, feature: str) -> GuardResult:
    """Evaluate a region gated only by subscription feature."""
    if context is None or not context.is_authenticated:
        return GuardResult(GuardOutcome.LOGIN_REQUIRED, LOGIN_MESSAGE)
    if not has_subscription_feature(context.subscription_tier, feature):
        return GuardResult(
            GuardOutcome.UPGRADE_REQUIRED, _upgrade_message(feature), feature
        )
    return GuardResult(GuardOutcome.GRANTED)


def evaluate_guard(
    context: AccessContext | None,
    resource: Resource,
    action: Action,
    ownership: RecordOwnership | None = None,
    feature: str | None = None,
) -> GuardResult:
    """
    Evaluate a protected region.

    The context is scoped to the record first, so owning the current
    business says nothing about records kept elsewhere.

    Args:
        context: Requester context
        resource: Resource being accessed
        action: Action being performed
        ownership: Ownership data of the specific record, if any
        feature: Subscription feature the region also needs, if any

    Returns:
        GuardResult with the outcome and a user-facing message
    """
    if context is not None:
        context = context.for_record(ownership)
    decision = check_permission(context, resource, action, ownership)
    return guard_result(decision, context, resource, action, feature)


def guard_result(
    decision: Decision,
    context: AccessContext | None,
    resource: Resource,
    action: Action,
    feature: str | None = None,
) -> GuardResult:
    """Map an access decision (plus optional feature) to a guard outcome."""
    if decision == Decision.DENY_UNAUTHENTICATED:
        return GuardResult(GuardOutcome.LOGIN_REQUIRED, LOGIN_MESSAGE)
    if decision == Decision.DENY:
        resource_name = Resource(resource).value
        action_name = Action(action).value
        return GuardResult(
            GuardOutcome.FORBIDDEN,
            f"You don't have permission to {action_name} {resource_name}",
        )
    if feature is not None and not has_subscription_feature(
        context.subscription_tier, feature
    ):
        return GuardResult(
            GuardOutcome.UPGRADE_REQUIRED, _upgrade_message(feature), feature
        )
    return GuardResult(GuardOutcome.GRANTED)


def raise_for_result(result: GuardResult, context: AccessContext | None) -> None:
    """Raise the exception matching a non-granted guard result."""
    if result.granted:
        return

    user_id = context.user_id if context else None
    logger.warning(f"Access {result.outcome.value} for user {user_id}: {result.message}")

    if result.outcome == GuardOutcome.LOGIN_REQUIRED:
        raise UnauthorizedException(result.message)
    if result.outcome == GuardOutcome.UPGRADE_REQUIRED:
        tier = context.subscription_tier if context else SubscriptionTier.FREE
        raise UpgradeRequiredException(result.message, result.feature, tier.value)
    raise ForbiddenException(result.message)


def enforce_guard(
    context: AccessContext | None,
    resource: Resource,
    action: Action,
    ownership: RecordOwnership | None = None,
    feature: str | None = None,
) -> None:
    """
    Evaluate a guard and raise unless access is granted.

    Raises:
        UnauthorizedException: If the context carries no identity
        ForbiddenException: If the role or ownership does not permit the action
        UpgradeRequiredException: If the subscription lacks the feature
    """
    result = evaluate_guard(context, resource, action, ownership, feature)
    raise_for_result(result, context)


def enforce_feature(context: AccessContext | None, feature: str) -> None:
    """Evaluate a feature-only guard and raise unless granted."""
    raise_for_result(evaluate_feature_guard(context, feature), context)


def enforce_login(context: AccessContext | None) -> None:
    """Raise before any record lookup when the request carries no identity."""
    if context is None or not context.is_authenticated:
        raise_for_result(GuardResult(GuardOutcome.LOGIN_REQUIRED, LOGIN_MESSAGE), context)
