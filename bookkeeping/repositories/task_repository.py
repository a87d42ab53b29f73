from typing import Optional
from sqlalchemy.orm import Session
from bookkeeping.models.task import Task, TaskStatus


class TaskRepository:
    """Repository for Task data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, task_id: int) -> Optional[Task]:
        """Get task by ID"""
        return self.db.query(Task).filter(Task.id == task_id).first()

    def get_with_filters(
        self,
        business_id: int,
        assigned_to: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> list[Task]:
        """Get tasks of a business, soonest due first"""
        query = self.db.query(Task).filter(Task.business_id == business_id)
        if assigned_to is not None:
            query = query.filter(Task.assigned_to == assigned_to)
        if status is not None:
            query = query.filter(Task.status == status)
        return query.order_by(Task.due_date.is_(None), Task.due_date, Task.id).all()

    def create(self, task: Task) -> Task:
        """Create a new task"""
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def update(self, task: Task) -> Task:
        """Update a task"""
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, task: Task) -> None:
        """Delete a task"""
        self.db.delete(task)
        self.db.commit()
