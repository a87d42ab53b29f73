from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional
from bookkeeping.models.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a task on the current business"""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    assigned_to: Optional[str] = Field(None, description="Member of the business")
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    """Schema for updating a task"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    assigned_to: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskResponse(BaseModel):
    """Schema for task response"""

    model_config = {"from_attributes": True}

    id: int
    business_id: int
    created_by: str
    assigned_to: Optional[str]
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date]
    created_at: datetime
    updated_at: datetime
