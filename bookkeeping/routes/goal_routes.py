from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.models.goal import GoalStatus
from bookkeeping.services.goal_service import GoalService
from bookkeeping.schemas.goal_schemas import (
    GoalContribution,
    GoalCreate,
    GoalResponse,
    GoalUpdate,
)

router = APIRouter()


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_data: GoalCreate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Create a savings goal.

    - Optionally linked to one of your businesses
    - Completed automatically once current_amount reaches target_amount
    """
    service = GoalService(db)
    return service.create_goal(goal_data, context)


@router.get("", response_model=list[GoalResponse])
async def list_goals(
    status: Optional[GoalStatus] = Query(None, description="Filter by status"),
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """List your goals, nearest deadline first"""
    service = GoalService(db)
    return service.get_goals(context, status)


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(
    goal_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get a specific goal by ID"""
    service = GoalService(db)
    return service.get_goal(goal_id, context)


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: int,
    goal_data: GoalUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Update a goal (partial update)"""
    service = GoalService(db)
    return service.update_goal(goal_id, goal_data, context)


@router.post("/{goal_id}/contributions", response_model=GoalResponse)
async def contribute_to_goal(
    goal_id: int,
    contribution: GoalContribution,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Add money to a goal"""
    service = GoalService(db)
    return service.contribute(goal_id, contribution, context)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Delete a goal"""
    service = GoalService(db)
    service.delete_goal(goal_id, context)
