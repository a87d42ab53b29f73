from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional
from bookkeeping.models.role import Role


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile"""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's role (admin only)"""

    role: Role


class UserStatusUpdate(BaseModel):
    """Schema for activating or deactivating a user (admin only)"""

    is_active: bool


class UserResponse(BaseModel):
    """Schema for user response"""

    model_config = {"from_attributes": True}

    id: str
    email: Optional[str]
    full_name: Optional[str]
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    """Schema for list of users"""

    users: list[UserResponse]
    total: int


class AdminOverviewResponse(BaseModel):
    """Platform-wide figures for the admin dashboard"""

    users_by_role: dict[str, int]
    businesses_by_status: dict[str, int]
    businesses_by_tier: dict[str, int]
    total_income: float
    total_expenses: float
    net_income: float
    pending_transactions: int
