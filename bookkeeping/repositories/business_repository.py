"""Repository for Business model operations."""

from sqlalchemy import func
from sqlalchemy.orm import Session
from bookkeeping.models.business import Business
from bookkeeping.models.business_member import BusinessMember


class BusinessRepository:
    """Repository for Business model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, business_id: int) -> Business | None:
        """
        Get business by ID.

        Args:
            business_id: Business ID

        Returns:
            Business object or None if not found
        """
        return self.db.query(Business).filter(Business.id == business_id).first()

    def get_all(self) -> list[Business]:
        """
        Get all businesses.

        Returns:
            List of all Business objects
        """
        return self.db.query(Business).order_by(Business.id).all()

    def get_for_user(self, user_id: str) -> list[Business]:
        """
        Get every business the user belongs to (owned or member).

        Args:
            user_id: User ID

        Returns:
            List of Business objects ordered by ID
        """
        return (
            self.db.query(Business)
            .join(BusinessMember, BusinessMember.business_id == Business.id)
            .filter(BusinessMember.user_id == user_id)
            .order_by(Business.id)
            .all()
        )

    def count_by_status(self) -> dict[str, int]:
        """Count businesses grouped by status"""
        rows = self.db.query(Business.status, func.count(Business.id)).group_by(Business.status).all()
        return {status: count for status, count in rows}

    def count_by_tier(self) -> dict[str, int]:
        """Count businesses grouped by subscription tier (None for no plan)"""
        rows = (
            self.db.query(Business.subscription_tier, func.count(Business.id))
            .group_by(Business.subscription_tier)
            .all()
        )
        return {(tier.value if tier else "none"): count for tier, count in rows}

    def create(self, business: Business) -> Business:
        """
        Create a new business without committing.

        Caller commits once the owner membership is added.
        """
        self.db.add(business)
        self.db.flush()
        return business

    def update(self, business: Business) -> Business:
        """
        Update an existing business.

        Args:
            business: Business object with updated fields

        Returns:
            Updated Business object
        """
        self.db.commit()
        self.db.refresh(business)
        return business

    def delete(self, business: Business) -> None:
        """
        Delete a business.

        WARNING: This will cascade delete all transactions, reports,
        documents, tasks and memberships of this business.

        Args:
            business: Business object to delete
        """
        self.db.delete(business)
        self.db.commit()
