from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.goal import Goal, GoalStatus
from bookkeeping.models.role import Action, Resource
from bookkeeping.repositories.goal_repository import GoalRepository
from bookkeeping.schemas.goal_schemas import GoalContribution, GoalCreate, GoalUpdate


def goal_ownership(goal: Goal) -> RecordOwnership:
    return RecordOwnership(owner_id=goal.user_id, business_id=goal.business_id)


def sync_goal_status(goal: Goal) -> None:
    """Complete an active goal that reached its target, reopen one that fell below it"""
    reached = float(goal.current_amount) >= float(goal.target_amount)
    if reached and goal.status == GoalStatus.ACTIVE:
        goal.status = GoalStatus.COMPLETED
    elif not reached and goal.status == GoalStatus.COMPLETED:
        goal.status = GoalStatus.ACTIVE


class GoalService:
    """Service layer for savings goals"""

    def __init__(self, db: Session):
        self.db = db
        self.goal_repo = GoalRepository(db)

    def _get(self, goal_id: int) -> Goal:
        goal = self.goal_repo.get_by_id(goal_id)
        if not goal:
            raise NotFoundException(f"Goal {goal_id} not found")
        return goal

    def create_goal(self, goal_data: GoalCreate, context: AccessContext) -> Goal:
        """
        Create a goal owned by the caller.

        Raises:
            ForbiddenException: If the role may not create goals
            ValidationException: If business_id is not one of the user's businesses
        """
        enforce_guard(
            context,
            Resource.GOAL,
            Action.CREATE,
            RecordOwnership(owner_id=context.user_id, business_id=goal_data.business_id),
        )

        if (
            goal_data.business_id is not None
            and not context.is_admin()
            and not context.is_member_of(goal_data.business_id)
        ):
            raise ValidationException("Goals can only be linked to your own businesses")

        goal = Goal(
            user_id=context.user_id, status=GoalStatus.ACTIVE, **goal_data.model_dump()
        )
        sync_goal_status(goal)
        goal = self.goal_repo.create(goal)
        logger.info(f"Goal {goal.id} created by {context.user_id}")
        return goal

    def get_goals(
        self, context: AccessContext, status: Optional[GoalStatus] = None
    ) -> list[Goal]:
        """List the caller's goals"""
        enforce_guard(
            context,
            Resource.GOAL,
            Action.READ,
            RecordOwnership(owner_id=context.user_id),
        )
        return self.goal_repo.get_by_user(context.user_id, status)

    def get_goal(self, goal_id: int, context: AccessContext) -> Goal:
        """
        Get goal by ID with ownership verification.

        Raises:
            NotFoundException: If goal doesn't exist
            ForbiddenException: If user has no access to it
        """
        goal = self._get(goal_id)
        enforce_guard(context, Resource.GOAL, Action.READ, goal_ownership(goal))
        return goal

    def update_goal(self, goal_id: int, goal_data: GoalUpdate, context: AccessContext) -> Goal:
        """
        Update a goal.

        Unless the status is set explicitly, it follows the amounts.
        """
        goal = self._get(goal_id)
        enforce_guard(context, Resource.GOAL, Action.UPDATE, goal_ownership(goal))

        changes = goal_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(goal, field, value)

        if "status" not in changes:
            sync_goal_status(goal)

        return self.goal_repo.update(goal)

    def contribute(
        self, goal_id: int, contribution: GoalContribution, context: AccessContext
    ) -> Goal:
        """
        Add money to a goal.

        Raises:
            ValidationException: If the goal is paused or cancelled
        """
        goal = self._get(goal_id)
        enforce_guard(context, Resource.GOAL, Action.UPDATE, goal_ownership(goal))

        if goal.status in (GoalStatus.PAUSED, GoalStatus.CANCELLED):
            raise ValidationException(f"Cannot contribute to a {goal.status.value} goal")

        goal.current_amount = float(goal.current_amount) + contribution.amount
        sync_goal_status(goal)
        goal = self.goal_repo.update(goal)
        if goal.status == GoalStatus.COMPLETED:
            logger.info(f"Goal {goal_id} completed")
        return goal

    def delete_goal(self, goal_id: int, context: AccessContext) -> None:
        """Delete a goal"""
        goal = self._get(goal_id)
        enforce_guard(context, Resource.GOAL, Action.DELETE, goal_ownership(goal))

        self.goal_repo.delete(goal)
        logger.info(f"Goal {goal_id} deleted by {context.user_id}")
