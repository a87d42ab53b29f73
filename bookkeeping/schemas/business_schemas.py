from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from bookkeeping.models.role import BusinessRole, SubscriptionTier


class BusinessCreate(BaseModel):
    """Create a business (caller becomes its owner)"""

    name: str = Field(..., min_length=1, max_length=255)
    business_type: Optional[str] = Field(None, max_length=100)


class BusinessUpdate(BaseModel):
    """Update business details"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    business_type: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, pattern="^(active|inactive|suspended)$")


class BusinessSubscriptionUpdate(BaseModel):
    """Change a business's plan (admin only)"""

    subscription_tier: SubscriptionTier


class BusinessResponse(BaseModel):
    """Business details response"""

    id: int
    name: str
    owner_id: str
    business_type: Optional[str]
    status: str
    subscription_tier: Optional[SubscriptionTier]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserBusinessResponse(BusinessResponse):
    """Business with the requesting user's role in it"""

    role: Optional[BusinessRole]


class BusinessMemberResponse(BaseModel):
    """Business member details with user info"""

    id: int
    user_id: str
    email: Optional[str]
    role: BusinessRole
    created_at: datetime

    model_config = {"from_attributes": True}


class BusinessMemberAdd(BaseModel):
    """Add an existing user to a business"""

    user_id: str = Field(..., description="ID of the user to add", min_length=1)
    role: BusinessRole = Field(
        default=BusinessRole.MEMBER, description="Role to assign (default: MEMBER)"
    )


class BusinessMemberRemoveResponse(BaseModel):
    """Response after removing member"""

    message: str
    removed_user_id: str


class BusinessSummaryResponse(BaseModel):
    """Headline figures of a business"""

    business_id: int
    total_income: float
    total_expenses: float
    net_income: float
    transaction_count: int
    pending_transactions: int
    member_count: int
