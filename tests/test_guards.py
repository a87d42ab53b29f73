import pytest

from bookkeeping.core.exceptions import (
    ForbiddenException,
    UnauthorizedException,
    UpgradeRequiredException,
)
from bookkeeping.core.guards import (
    LOGIN_MESSAGE,
    GuardOutcome,
    enforce_feature,
    enforce_guard,
    enforce_login,
    evaluate_feature_guard,
    evaluate_guard,
)
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Action, Resource, Role, SubscriptionTier


def client_context(tier=SubscriptionTier.FREE) -> AccessContext:
    return AccessContext(
        user_id="u1",
        user_role=Role.CLIENT,
        is_owner=True,
        business_id=1,
        subscription_tier=tier,
        user_business_ids=frozenset({1}),
    )


class TestEvaluateGuard:
    """Mapping decisions to guard outcomes"""

    def test_granted(self):
        result = evaluate_guard(
            client_context(), Resource.TRANSACTION, Action.READ, RecordOwnership(business_id=1)
        )
        assert result.granted
        assert result.outcome == GuardOutcome.GRANTED

    def test_login_required_for_anonymous(self):
        result = evaluate_guard(AccessContext.anonymous(), Resource.REPORT, Action.READ)
        assert result.outcome == GuardOutcome.LOGIN_REQUIRED
        assert result.message == LOGIN_MESSAGE

    def test_forbidden_message_names_action(self):
        result = evaluate_guard(client_context(), Resource.TRANSACTION, Action.APPROVE)
        assert result.outcome == GuardOutcome.FORBIDDEN
        assert result.message == "You don't have permission to approve transaction"

    def test_upgrade_required_after_permission(self):
        result = evaluate_guard(
            client_context(),
            Resource.TRANSACTION,
            Action.EXPORT,
            RecordOwnership(business_id=1),
            feature="data_export",
        )
        assert result.outcome == GuardOutcome.UPGRADE_REQUIRED
        assert result.feature == "data_export"
        assert "basic plan" in result.message

    def test_forbidden_takes_precedence_over_upgrade(self):
        """A denied action never turns into an upgrade prompt"""
        result = evaluate_guard(
            client_context(), Resource.REPORT, Action.APPROVE, feature="custom_reports"
        )
        assert result.outcome == GuardOutcome.FORBIDDEN

    def test_feature_on_higher_tier(self):
        result = evaluate_guard(
            client_context(SubscriptionTier.PREMIUM),
            Resource.REPORT,
            Action.CREATE,
            RecordOwnership(business_id=1),
            feature="custom_reports",
        )
        assert result.granted

    def test_owner_flag_scoped_to_current_business(self):
        """Owning the selected business does not reach records kept elsewhere"""
        context = AccessContext(user_id="u2", user_role=Role.CLIENT, is_owner=True, business_id=1)

        inside = evaluate_guard(
            context, Resource.DOCUMENT, Action.READ, RecordOwnership(owner_id="u9", business_id=1)
        )
        outside = evaluate_guard(
            context, Resource.DOCUMENT, Action.READ, RecordOwnership(owner_id="u9", business_id=2)
        )
        personal = evaluate_guard(
            context, Resource.GOAL, Action.READ, RecordOwnership(owner_id="u9")
        )
        assert inside.granted
        assert outside.outcome == GuardOutcome.FORBIDDEN
        assert personal.outcome == GuardOutcome.FORBIDDEN


class TestFeatureGuard:
    """Feature-only regions"""

    def test_anonymous(self):
        assert evaluate_feature_guard(None, "basic_dashboard").outcome == GuardOutcome.LOGIN_REQUIRED

    def test_unknown_feature_upgrade(self):
        result = evaluate_feature_guard(client_context(SubscriptionTier.ENTERPRISE), "time_travel")
        assert result.outcome == GuardOutcome.UPGRADE_REQUIRED
        assert "not available on any plan" in result.message


class TestEnforce:
    """Exceptions raised for each fallback"""

    def test_unauthorized(self):
        with pytest.raises(UnauthorizedException):
            enforce_guard(AccessContext.anonymous(), Resource.BUSINESS, Action.READ)

    def test_forbidden(self):
        with pytest.raises(ForbiddenException):
            enforce_guard(client_context(), Resource.BUSINESS, Action.DELETE)

    def test_upgrade_required_carries_tier(self):
        with pytest.raises(UpgradeRequiredException) as exc_info:
            enforce_feature(client_context(SubscriptionTier.BASIC), "ai_insights")
        assert exc_info.value.feature == "ai_insights"
        assert exc_info.value.current_tier == "basic"

    def test_granted_returns_none(self):
        assert enforce_guard(client_context(), Resource.BUSINESS, Action.CREATE) is None

    def test_login_required_before_lookup(self):
        with pytest.raises(UnauthorizedException):
            enforce_login(None)
        with pytest.raises(UnauthorizedException):
            enforce_login(AccessContext.anonymous())
        assert enforce_login(client_context()) is None
