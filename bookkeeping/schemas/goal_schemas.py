from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional
from bookkeeping.models.goal import GoalPriority, GoalStatus


class GoalCreate(BaseModel):
    """Schema for creating a savings goal"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category: str = Field("savings", min_length=1, max_length=100)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(0, ge=0)
    deadline: Optional[date] = None
    priority: GoalPriority = GoalPriority.MEDIUM
    business_id: Optional[int] = Field(None, description="Business the goal is saved for")


class GoalUpdate(BaseModel):
    """Schema for updating a goal"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    target_amount: Optional[float] = Field(None, gt=0)
    current_amount: Optional[float] = Field(None, ge=0)
    deadline: Optional[date] = None
    priority: Optional[GoalPriority] = None
    status: Optional[GoalStatus] = None


class GoalContribution(BaseModel):
    """Money put towards a goal"""

    amount: float = Field(..., gt=0)


class GoalResponse(BaseModel):
    """Schema for goal response"""

    model_config = {"from_attributes": True}

    id: int
    user_id: str
    business_id: Optional[int]
    title: str
    description: Optional[str]
    category: str
    target_amount: float
    current_amount: float
    deadline: Optional[date]
    priority: GoalPriority
    status: GoalStatus
    progress: float
    created_at: datetime
    updated_at: datetime
