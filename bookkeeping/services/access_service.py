from sqlalchemy.orm import Session

from bookkeeping.config import settings
from bookkeeping.core.access import (
    allowed_actions,
    dashboard_sections,
    explain_permission,
    features_for_tier,
)
from bookkeeping.core.exceptions import NotFoundException
from bookkeeping.core.guards import (
    GuardOutcome,
    enforce_feature,
    evaluate_feature_guard,
    guard_result,
)
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Resource, Role, SubscriptionTier
from bookkeeping.models.user import User
from bookkeeping.repositories.business_member_repository import BusinessMemberRepository
from bookkeeping.repositories.business_repository import BusinessRepository
from bookkeeping.schemas.access_schemas import AccessCheckRequest


class AccessService:
    """Builds access contexts and answers access questions"""

    def __init__(self, db: Session):
        self.db = db
        self.business_repo = BusinessRepository(db)
        self.member_repo = BusinessMemberRepository(db)

    def build_context(self, user: User, business_id: int | None = None) -> AccessContext:
        """
        Assemble the access context for a user and their current business.

        Args:
            user: Authenticated user
            business_id: Currently selected business, if any

        Returns:
            Fully populated AccessContext

        Raises:
            NotFoundException: If the selected business does not exist
        """
        role = Role.from_label(user.role)
        memberships = self.member_repo.get_user_memberships(user.id)
        business_ids = frozenset(m.business_id for m in memberships)

        business_role = None
        is_owner = False
        tier = SubscriptionTier.parse(settings.DEFAULT_SUBSCRIPTION_TIER)

        if business_id is not None:
            business = self.business_repo.get_by_id(business_id)
            if not business:
                raise NotFoundException(f"Business {business_id} not found")

            is_owner = business.owner_id == user.id
            membership = next((m for m in memberships if m.business_id == business_id), None)
            business_role = membership.role if membership else None
            # Outsiders keep the default plan
            entitled = membership is not None or is_owner or role == Role.ADMIN
            if entitled and business.subscription_tier is not None:
                tier = business.subscription_tier

        return AccessContext(
            user_id=user.id,
            user_role=role,
            business_role=business_role,
            is_owner=is_owner,
            business_id=business_id,
            subscription_tier=tier,
            user_business_ids=business_ids,
        )

    def get_profile(self, context: AccessContext) -> dict:
        """
        Summarize what the user may do (basic_dashboard feature).

        Raises:
            UnauthorizedException: If the context is anonymous
        """
        enforce_feature(context, "basic_dashboard")

        return {
            "user_id": context.user_id,
            "role": context.user_role,
            "business_id": context.business_id,
            "business_role": context.business_role,
            "is_owner": context.is_owner,
            "subscription_tier": context.subscription_tier,
            "business_ids": sorted(context.user_business_ids),
            "features": features_for_tier(context.subscription_tier),
            "dashboards": dashboard_sections(context.user_role),
            "allowed_actions": {
                resource: allowed_actions(context.user_role, resource)
                for resource in Resource
            },
        }

    def check(self, context: AccessContext, request: AccessCheckRequest) -> dict:
        """
        Answer an access question without raising.

        Anonymous callers get DENY_UNAUTHENTICATED in the response body so a
        client can choose between a login prompt, a forbidden message and
        an upgrade prompt.
        """
        ownership = None
        if request.owner_id is not None or request.business_id is not None:
            ownership = RecordOwnership(owner_id=request.owner_id, business_id=request.business_id)

        details = explain_permission(
            context.for_record(ownership), request.resource, request.action, ownership
        )
        result = guard_result(
            details["decision"], context, request.resource, request.action, request.feature
        )

        reason = details["reason"]
        if result.outcome == GuardOutcome.UPGRADE_REQUIRED:
            reason = result.message

        return {
            "decision": details["decision"],
            "allowed": result.granted,
            "outcome": result.outcome.value,
            "rule": details["rule"],
            "admin_bypass": details["admin_bypass"],
            "reason": reason,
        }

    def check_feature(self, context: AccessContext, feature: str) -> dict:
        """Answer whether the current plan includes a feature"""
        result = evaluate_feature_guard(context, feature)
        return {
            "feature": feature,
            "allowed": result.granted,
            "outcome": result.outcome.value,
            "subscription_tier": context.subscription_tier,
            "message": result.message,
        }
