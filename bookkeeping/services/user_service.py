from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Action, Resource, Role
from bookkeeping.models.transaction import TransactionStatus
from bookkeeping.models.user import User
from bookkeeping.repositories.business_repository import BusinessRepository
from bookkeeping.repositories.transaction_repository import TransactionRepository
from bookkeeping.repositories.user_repository import UserRepository
from bookkeeping.schemas.user_schemas import (
    UserProfileUpdate,
    UserRoleUpdate,
    UserStatusUpdate,
)


class UserService:
    """
    Service layer for user profiles and user administration.

    Listing users, changing roles and (de)activating accounts pass no
    ownership to the access check, so only the admin bypass grants them.
    """

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def _get(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundException(f"User {user_id} not found")
        return user

    def get_me(self, context: AccessContext) -> User:
        """Get the caller's own profile"""
        enforce_guard(
            context, Resource.USER, Action.READ, RecordOwnership(owner_id=context.user_id)
        )
        return self._get(context.user_id)

    def update_me(self, data: UserProfileUpdate, context: AccessContext) -> User:
        """Update the caller's own profile (never the role)"""
        enforce_guard(
            context, Resource.USER, Action.UPDATE, RecordOwnership(owner_id=context.user_id)
        )
        user = self._get(context.user_id)

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, field, value)

        return self.user_repo.update(user)

    def get_users(
        self,
        context: AccessContext,
        role: Optional[Role] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """List all users (admin only)"""
        enforce_guard(context, Resource.USER, Action.READ)
        return self.user_repo.get_all(role=role, limit=limit, offset=offset)

    def get_user(self, user_id: str, context: AccessContext) -> User:
        """Get a user (themselves or, for admins, anyone)"""
        user = self._get(user_id)
        enforce_guard(context, Resource.USER, Action.READ, RecordOwnership(owner_id=user.id))
        return user

    def change_role(self, user_id: str, data: UserRoleUpdate, context: AccessContext) -> User:
        """
        Change a user's platform role (admin only).

        Raises:
            ValidationException: If an admin tries to change their own role
        """
        user = self._get(user_id)
        enforce_guard(context, Resource.USER, Action.UPDATE)

        if user.id == context.user_id:
            raise ValidationException("Admins cannot change their own role")

        old_role = user.role
        user.role = data.role
        user = self.user_repo.update(user)
        logger.info(
            f"Role of user {user_id} changed from {old_role.value} to {data.role.value} by {context.user_id}"
        )
        return user

    def set_active(self, user_id: str, data: UserStatusUpdate, context: AccessContext) -> User:
        """
        Activate or deactivate an account (admin only).

        Raises:
            ValidationException: If an admin tries to deactivate themselves
        """
        user = self._get(user_id)
        enforce_guard(context, Resource.USER, Action.DELETE)

        if user.id == context.user_id and not data.is_active:
            raise ValidationException("Admins cannot deactivate their own account")

        user.is_active = data.is_active
        user = self.user_repo.update(user)
        logger.info(
            f"User {user_id} {'activated' if data.is_active else 'deactivated'} by {context.user_id}"
        )
        return user


class AdminService:
    """Platform-wide analytics for the admin dashboard"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.business_repo = BusinessRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def get_overview(self, context: AccessContext) -> dict:
        """
        Counts and totals across every business.

        Raises:
            ForbiddenException: If the caller is not an admin
        """
        enforce_guard(context, Resource.USER, Action.READ)

        totals = self.transaction_repo.totals_by_type()
        return {
            "users_by_role": self.user_repo.count_by_role(),
            "businesses_by_status": self.business_repo.count_by_status(),
            "businesses_by_tier": self.business_repo.count_by_tier(),
            "total_income": totals["income"],
            "total_expenses": totals["expense"],
            "net_income": round(totals["income"] - totals["expense"], 2),
            "pending_transactions": self.transaction_repo.count_by_status(
                TransactionStatus.PENDING
            ),
        }
