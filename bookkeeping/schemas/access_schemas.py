from typing import Optional
from pydantic import BaseModel, Field
from bookkeeping.models.role import (
    Action,
    BusinessRole,
    Decision,
    Resource,
    Role,
    RuleEffect,
    SubscriptionTier,
)


class AccessProfileResponse(BaseModel):
    """What the authenticated user may do in the current business"""

    user_id: str
    role: Role
    business_id: Optional[int]
    business_role: Optional[BusinessRole]
    is_owner: bool
    subscription_tier: SubscriptionTier
    business_ids: list[int]
    features: list[str]
    dashboards: list[str]
    allowed_actions: dict[Resource, list[Action]]


class AccessCheckRequest(BaseModel):
    """Ask for a decision on a resource/action, optionally for a record"""

    resource: Resource
    action: Action
    owner_id: Optional[str] = Field(None, description="Owner of the record")
    business_id: Optional[int] = Field(None, description="Business of the record")
    feature: Optional[str] = Field(None, description="Subscription feature also required")


class AccessCheckResponse(BaseModel):
    """Decision and how it was reached"""

    decision: Decision
    allowed: bool
    outcome: str
    rule: Optional[RuleEffect]
    admin_bypass: bool
    reason: str


class FeatureCheckResponse(BaseModel):
    """Whether the current plan includes a feature"""

    feature: str
    allowed: bool
    outcome: str
    subscription_tier: SubscriptionTier
    message: str
