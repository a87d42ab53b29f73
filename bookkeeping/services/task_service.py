from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Action, Resource
from bookkeeping.models.task import Task, TaskStatus
from bookkeeping.repositories.business_member_repository import BusinessMemberRepository
from bookkeeping.repositories.task_repository import TaskRepository
from bookkeeping.schemas.task_schemas import TaskCreate, TaskUpdate


def task_ownership(task: Task) -> RecordOwnership:
    return RecordOwnership(owner_id=task.assigned_to, business_id=task.business_id)


class TaskService:
    """Service layer for bookkeeping tasks"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository(db)
        self.member_repo = BusinessMemberRepository(db)

    def _get(self, task_id: int) -> Task:
        task = self.task_repo.get_by_id(task_id)
        if not task:
            raise NotFoundException(f"Task {task_id} not found")
        return task

    def _check_assignee(self, assignee_id: Optional[str], business_id: int) -> None:
        if assignee_id is None:
            return
        if not self.member_repo.get_membership(assignee_id, business_id):
            raise ValidationException(
                f"User {assignee_id} is not a member of business {business_id}"
            )

    def create_task(self, task_data: TaskCreate, context: AccessContext) -> Task:
        """
        Create a task on the current business.

        Raises:
            ForbiddenException: If user may not create tasks (clients)
            ValidationException: If the assignee is not a member of the business
        """
        enforce_guard(
            context,
            Resource.TASK,
            Action.CREATE,
            RecordOwnership(business_id=context.business_id),
        )
        self._check_assignee(task_data.assigned_to, context.business_id)

        task = Task(
            business_id=context.business_id,
            created_by=context.user_id,
            status=TaskStatus.TODO,
            **task_data.model_dump(),
        )
        task = self.task_repo.create(task)
        logger.info(f"Task {task.id} created in business {task.business_id}")
        return task

    def get_tasks(
        self, context: AccessContext, status: Optional[TaskStatus] = None
    ) -> list[Task]:
        """
        List tasks of the current business.

        Accountants only see tasks assigned to them.
        """
        enforce_guard(
            context,
            Resource.TASK,
            Action.READ,
            RecordOwnership(business_id=context.business_id),
        )

        assigned_to = context.user_id if context.is_accountant() else None
        return self.task_repo.get_with_filters(
            context.business_id, assigned_to=assigned_to, status=status
        )

    def get_task(self, task_id: int, context: AccessContext) -> Task:
        """Get task by ID with ownership verification"""
        task = self._get(task_id)
        enforce_guard(context, Resource.TASK, Action.READ, task_ownership(task))
        return task

    def update_task(self, task_id: int, task_data: TaskUpdate, context: AccessContext) -> Task:
        """
        Update a task (status, priority, assignee, ...).

        Raises:
            ValidationException: If the new assignee is not a member of the business
        """
        task = self._get(task_id)
        enforce_guard(context, Resource.TASK, Action.UPDATE, task_ownership(task))

        changes = task_data.model_dump(exclude_unset=True, exclude_none=True)
        if "assigned_to" in changes:
            self._check_assignee(changes["assigned_to"], task.business_id)

        for field, value in changes.items():
            setattr(task, field, value)

        return self.task_repo.update(task)

    def delete_task(self, task_id: int, context: AccessContext) -> None:
        """Delete a task"""
        task = self._get(task_id)
        enforce_guard(context, Resource.TASK, Action.DELETE, task_ownership(task))

        self.task_repo.delete(task)
        logger.info(f"Task {task_id} deleted by {context.user_id}")
