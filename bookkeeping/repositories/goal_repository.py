from typing import Optional
from sqlalchemy.orm import Session
from bookkeeping.models.goal import Goal, GoalStatus


class GoalRepository:
    """Repository for Goal data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, goal_id: int) -> Optional[Goal]:
        """Get goal by ID"""
        return self.db.query(Goal).filter(Goal.id == goal_id).first()

    def get_by_user(self, user_id: str, status: Optional[GoalStatus] = None) -> list[Goal]:
        """Get a user's goals, nearest deadline first"""
        query = self.db.query(Goal).filter(Goal.user_id == user_id)
        if status is not None:
            query = query.filter(Goal.status == status)
        return query.order_by(Goal.deadline.is_(None), Goal.deadline, Goal.id).all()

    def create(self, goal: Goal) -> Goal:
        """Create a new goal"""
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def update(self, goal: Goal) -> Goal:
        """Update a goal"""
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def delete(self, goal: Goal) -> None:
        """Delete a goal"""
        self.db.delete(goal)
        self.db.commit()
