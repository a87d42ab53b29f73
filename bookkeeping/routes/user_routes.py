from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.models.role import Role
from bookkeeping.services.user_service import UserService
from bookkeeping.schemas.user_schemas import (
    UserListResponse,
    UserProfileUpdate,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get your own profile"""
    service = UserService(db)
    return service.get_me(context)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    data: UserProfileUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Update your own profile.

    - The role cannot be changed here
    """
    service = UserService(db)
    return service.update_me(data, context)


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[Role] = Query(None, description="Filter by role"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    List users.

    - **Requires admin**
    """
    service = UserService(db)
    users, total = service.get_users(context, role, limit, offset)
    return UserListResponse(users=users, total=total)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get a user profile (yourself, or anyone for admins)"""
    service = UserService(db)
    return service.get_user(user_id, context)


@router.put("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    data: UserRoleUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Change a user's role.

    - **Requires admin**
    - Admins cannot change their own role
    """
    service = UserService(db)
    return service.change_role(user_id, data, context)


@router.put("/{user_id}/status", response_model=UserResponse)
async def set_user_status(
    user_id: str,
    data: UserStatusUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Activate or deactivate an account.

    - **Requires admin**
    - Deactivated users get 403 on every request
    """
    service = UserService(db)
    return service.set_active(user_id, data, context)
