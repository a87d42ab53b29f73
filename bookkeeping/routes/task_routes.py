from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context, get_business_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.models.task import TaskStatus
from bookkeeping.services.task_service import TaskService
from bookkeeping.schemas.task_schemas import TaskCreate, TaskResponse, TaskUpdate

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Create a task on the current business.

    - Requires an accountant of the business or an admin
    """
    service = TaskService(db)
    return service.create_task(task_data, context)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    List tasks of the current business, soonest due first.

    Accountants see the tasks assigned to them.
    """
    service = TaskService(db)
    return service.get_tasks(context, status)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID"""
    service = TaskService(db)
    return service.get_task(task_id, context)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_data: TaskUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Update a task (partial update)"""
    service = TaskService(db)
    return service.update_task(task_id, task_data, context)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Delete a task"""
    service = TaskService(db)
    service.delete_task(task_id, context)
