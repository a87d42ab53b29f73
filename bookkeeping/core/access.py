"""
Access decision model.

Every protected operation in the API asks one question: can this context
perform this action on this resource (optionally: on this record)? The
answer comes from a static rule table keyed by (resource, action, role),
an explicit admin-bypass exclusion list, and a subscription feature table.

Rule table semantics:
- ALLOW: granted on role alone
- DENY: refused on role alone
- ALLOW_IF_OWNER: granted only with proof of ownership or membership
- no entry: refused (fail-closed)

Admins bypass the table for every (resource, action) pair that is not
listed in the exclusion list. Excluded pairs fall back to the admin row.

All functions here are pure: no I/O, no logging, no hidden state. Callers
log or audit decisions if they need to.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from bookkeeping.core.exceptions import InvalidAccessCheck
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import (
    Action,
    Decision,
    Resource,
    Role,
    RuleEffect,
    SubscriptionTier,
)

ALLOW = RuleEffect.ALLOW
DENY = RuleEffect.DENY
IF_OWNER = RuleEffect.ALLOW_IF_OWNER

# Per-role permission matrix. Anything not listed is denied.
ROLE_RULES: dict[Role, dict[Resource, dict[Action, RuleEffect]]] = {
    Role.CLIENT: {
        Resource.BUSINESS: {
            Action.CREATE: ALLOW,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: DENY,
            Action.EXPORT: IF_OWNER,
        },
        Resource.TRANSACTION: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
            Action.APPROVE: DENY,
            Action.EXPORT: IF_OWNER,
        },
        Resource.REPORT: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: DENY,
            Action.DELETE: DENY,
            Action.APPROVE: DENY,
            Action.EXPORT: IF_OWNER,
        },
        Resource.TASK: {
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
        },
        Resource.USER: {
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
        },
        Resource.DOCUMENT: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
            Action.EXPORT: IF_OWNER,
        },
        Resource.GOAL: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
        },
    },
    Role.ACCOUNTANT: {
        Resource.BUSINESS: {
            Action.CREATE: DENY,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: DENY,
            Action.EXPORT: IF_OWNER,
        },
        Resource.TRANSACTION: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
            Action.APPROVE: IF_OWNER,
            Action.EXPORT: IF_OWNER,
        },
        Resource.REPORT: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
            Action.APPROVE: IF_OWNER,
            Action.EXPORT: IF_OWNER,
        },
        Resource.TASK: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: IF_OWNER,
        },
        Resource.USER: {
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
        },
        Resource.DOCUMENT: {
            Action.CREATE: IF_OWNER,
            Action.READ: IF_OWNER,
            Action.UPDATE: IF_OWNER,
            Action.DELETE: DENY,
            Action.EXPORT: IF_OWNER,
        },
        Resource.GOAL: {
            Action.READ: IF_OWNER,
        },
    },
    # Consulted only for pairs listed in ADMIN_EXCLUSIONS.
    Role.ADMIN: {},
}

# (resource, action) pairs the admin bypass does not cover.
ADMIN_EXCLUSIONS: frozenset[tuple[Resource, Action]] = frozenset()

# Minimum plan that unlocks each feature.
FEATURE_TIERS: dict[str, SubscriptionTier] = {
    "basic_dashboard": SubscriptionTier.FREE,
    "basic_transactions": SubscriptionTier.FREE,
    "basic_reports": SubscriptionTier.FREE,
    "savings_goals": SubscriptionTier.FREE,
    "document_upload": SubscriptionTier.BASIC,
    "meeting_scheduling": SubscriptionTier.BASIC,
    "data_export": SubscriptionTier.BASIC,
    "advanced_analytics": SubscriptionTier.PREMIUM,
    "ai_insights": SubscriptionTier.PREMIUM,
    "ai_assistant": SubscriptionTier.PREMIUM,
    "custom_reports": SubscriptionTier.PREMIUM,
    "priority_support": SubscriptionTier.ENTERPRISE,
    "api_access": SubscriptionTier.ENTERPRISE,
    "white_labeling": SubscriptionTier.ENTERPRISE,
    "advanced_integrations": SubscriptionTier.ENTERPRISE,
}

DASHBOARD_SECTIONS: dict[Role, tuple[str, ...]] = {
    Role.ADMIN: ("admin", "accountant"),
    Role.ACCOUNTANT: ("accountant",),
    Role.CLIENT: ("client",),
}


def build_rule_table(
    role_rules: Mapping[Role, Mapping[Resource, Mapping[Action, RuleEffect]]],
) -> Mapping[tuple[Resource, Action, Role], RuleEffect]:
    """Flatten a per-role matrix into a read-only (resource, action, role) table."""
    table = {}
    for role, resources in role_rules.items():
        for resource, actions in resources.items():
            for action, effect in actions.items():
                table[(resource, action, role)] = effect
    return MappingProxyType(table)


@dataclass(frozen=True)
class AccessPolicy:
    """
    The static configuration consulted by every decision.

    Attributes:
        rules: (resource, action, role) -> rule effect
        admin_exclusions: Pairs where the admin bypass does not apply
        feature_tiers: Feature name -> minimum subscription tier
    """

    rules: Mapping[tuple[Resource, Action, Role], RuleEffect]
    admin_exclusions: frozenset[tuple[Resource, Action]] = frozenset()
    feature_tiers: Mapping[str, SubscriptionTier] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def rule_for(
        self, resource: Resource, action: Action, role: Role
    ) -> Optional[RuleEffect]:
        return self.rules.get((resource, action, role))

    def admin_bypass(self, resource: Resource, action: Action) -> bool:
        return (resource, action) not in self.admin_exclusions


DEFAULT_POLICY = AccessPolicy(
    rules=build_rule_table(ROLE_RULES),
    admin_exclusions=ADMIN_EXCLUSIONS,
    feature_tiers=MappingProxyType(dict(FEATURE_TIERS)),
)


def _coerce_resource(resource: Resource | str) -> Resource:
    if isinstance(resource, Resource):
        return resource
    try:
        return Resource(resource)
    except ValueError:
        raise InvalidAccessCheck(f"Unknown resource: {resource!r}") from None


def _coerce_action(action: Action | str) -> Action:
    if isinstance(action, Action):
        return action
    try:
        return Action(action)
    except ValueError:
        raise InvalidAccessCheck(f"Unknown action: {action!r}") from None


def _context_role(context: AccessContext | None) -> Role | None:
    if context is None:
        return None
    return Role.from_label(context.user_role)


def owns_record(context: AccessContext, ownership: RecordOwnership | None) -> bool:
    """
    Check the proof required by an ALLOW_IF_OWNER rule.

    Granted when the record was created by the user, when the user owns the
    current business, or when the record's business is one the user is a
    member of. Ownership data must be supplied in every case.
    """
    if ownership is None:
        return False
    if ownership.owner_id is not None and ownership.owner_id == context.user_id:
        return True
    if context.is_owner:
        return True
    return ownership.business_id is not None and (
        ownership.business_id in context.user_business_ids
    )


def _apply_rule(
    effect: Optional[RuleEffect],
    context: AccessContext,
    ownership: RecordOwnership | None,
) -> Decision:
    if effect is None or effect == RuleEffect.DENY:
        return Decision.DENY
    if effect == RuleEffect.ALLOW:
        return Decision.ALLOW
    return Decision.ALLOW if owns_record(context, ownership) else Decision.DENY


def check_permission(
    context: AccessContext | None,
    resource: Resource | str,
    action: Action | str,
    ownership: RecordOwnership | None = None,
    policy: AccessPolicy = DEFAULT_POLICY,
) -> Decision:
    """
    Decide whether a context may perform an action on a resource.

    Args:
        context: Requester context (None or no role means unauthenticated)
        resource: Resource being accessed
        action: Action being performed
        ownership: Ownership data of the specific record, if any
        policy: Rule tables to consult

    Returns:
        Decision.ALLOW, Decision.DENY or Decision.DENY_UNAUTHENTICATED

    Raises:
        InvalidAccessCheck: If resource or action is not a known value
    """
    resource = _coerce_resource(resource)
    action = _coerce_action(action)

    role = _context_role(context)
    if role is None:
        return Decision.DENY_UNAUTHENTICATED

    if role == Role.ADMIN and policy.admin_bypass(resource, action):
        return Decision.ALLOW

    return _apply_rule(policy.rule_for(resource, action, role), context, ownership)


def check_all(
    context: AccessContext | None,
    checks: Iterable[tuple[Any, ...]],
    policy: AccessPolicy = DEFAULT_POLICY,
) -> Decision:
    """
    Combine several checks; the first non-ALLOW decision wins.

    Each check is (resource, action) or (resource, action, ownership).
    """
    for check in checks:
        decision = check_permission(context, *check, policy=policy)
        if decision != Decision.ALLOW:
            return decision
    return Decision.ALLOW


def allowed_actions(
    role: Role | str | None,
    resource: Resource | str,
    policy: AccessPolicy = DEFAULT_POLICY,
) -> list[Action]:
    """
    List the actions a role may perform on a resource.

    ALLOW_IF_OWNER rules are included since they are granted on owned records.
    """
    resource = _coerce_resource(resource)
    role = Role.from_label(role)
    if role is None:
        return []

    actions = []
    for action in Action:
        if role == Role.ADMIN and policy.admin_bypass(resource, action):
            actions.append(action)
            continue
        effect = policy.rule_for(resource, action, role)
        if effect in (RuleEffect.ALLOW, RuleEffect.ALLOW_IF_OWNER):
            actions.append(action)
    return actions


def has_subscription_feature(
    tier: SubscriptionTier | str | None,
    feature_name: str,
    policy: AccessPolicy = DEFAULT_POLICY,
) -> bool:
    """
    Check whether a subscription tier unlocks a feature.

    Unknown features are locked. Unknown or missing tiers count as FREE.
    """
    required = policy.feature_tiers.get(feature_name)
    if required is None:
        return False
    return SubscriptionTier.parse(tier) >= required


def features_for_tier(
    tier: SubscriptionTier | str | None, policy: AccessPolicy = DEFAULT_POLICY
) -> list[str]:
    """List every feature unlocked by a tier, sorted by name."""
    return sorted(
        name
        for name in policy.feature_tiers
        if has_subscription_feature(tier, name, policy)
    )


def required_tier(
    feature_name: str, policy: AccessPolicy = DEFAULT_POLICY
) -> SubscriptionTier | None:
    """Minimum tier that unlocks a feature (None if unknown)."""
    return policy.feature_tiers.get(feature_name)


def dashboard_sections(role: Role | str | None) -> list[str]:
    """Dashboards a role may open."""
    role = Role.from_label(role)
    if role is None:
        return []
    return list(DASHBOARD_SECTIONS.get(role, ()))


def explain_permission(
    context: AccessContext | None,
    resource: Resource | str,
    action: Action | str,
    ownership: RecordOwnership | None = None,
    policy: AccessPolicy = DEFAULT_POLICY,
) -> dict:
    """
    Describe how a decision was reached.

    Returns:
        Dict with decision, role, consulted rule, admin bypass flag and reason
    """
    resource = _coerce_resource(resource)
    action = _coerce_action(action)
    decision = check_permission(context, resource, action, ownership, policy)
    role = _context_role(context)

    details = {
        "decision": decision,
        "resource": resource,
        "action": action,
        "role": role,
        "rule": None,
        "admin_bypass": False,
        "reason": "",
    }

    if role is None:
        details["reason"] = "No authenticated user"
        return details

    if role == Role.ADMIN and policy.admin_bypass(resource, action):
        details["admin_bypass"] = True
        details["reason"] = "Administrators have full access"
        return details

    effect = policy.rule_for(resource, action, role)
    details["rule"] = effect
    if effect is None:
        details["reason"] = f"No rule grants {action.value} on {resource.value} to {role.value}"
    elif effect == RuleEffect.DENY:
        details["reason"] = f"Role {role.value} may not {action.value} {resource.value}"
    elif effect == RuleEffect.ALLOW:
        details["reason"] = "Permission granted"
    elif decision == Decision.ALLOW:
        details["reason"] = "Permission granted on owned record"
    elif ownership is None:
        details["reason"] = "Ownership of a specific record is required"
    else:
        details["reason"] = "Record is not owned by the user or their businesses"
    return details
