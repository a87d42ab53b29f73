from sqlalchemy import func
from sqlalchemy.orm import Session
from bookkeeping.models.role import Role
from bookkeeping.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str, email: str | None = None) -> User:
        """
        Get user by ID or create if doesn't exist.

        This is called automatically when a user makes their first API
        request with a valid JWT from the hosted auth service. New users
        start as clients.

        Args:
            user_id: User ID from the JWT 'sub' claim
            email: Email claim of the JWT, if present

        Returns:
            User object (either existing or newly created)
        """
        user = self.get_by_id(user_id)

        if not user:
            user = User(id=user_id, email=email, role=Role.CLIENT)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        return user

    def get_by_id(self, user_id: str) -> User | None:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_all(self, role: Role | None = None, limit: int = 100, offset: int = 0) -> tuple[list[User], int]:
        """Get users, optionally filtered by role, with total count"""
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        total = query.count()
        users = query.order_by(User.created_at, User.id).limit(limit).offset(offset).all()
        return users, total

    def count_by_role(self) -> dict[str, int]:
        """Count users grouped by role"""
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role.value: count for role, count in rows}

    def update(self, user: User) -> User:
        """Update an existing user"""
        self.db.commit()
        self.db.refresh(user)
        return user
