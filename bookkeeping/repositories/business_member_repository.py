"""Repository for BusinessMember model operations."""

from sqlalchemy.orm import Session
from bookkeeping.models.business_member import BusinessMember
from bookkeeping.models.role import BusinessRole


class BusinessMemberRepository:
    """Repository for BusinessMember model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_membership(self, user_id: str, business_id: int) -> BusinessMember | None:
        """
        Get membership for a specific user in a specific business.

        Args:
            user_id: User ID
            business_id: Business ID

        Returns:
            BusinessMember object or None if not found
        """
        return (
            self.db.query(BusinessMember)
            .filter(
                BusinessMember.user_id == user_id,
                BusinessMember.business_id == business_id,
            )
            .first()
        )

    def get_business_members(self, business_id: int) -> list[BusinessMember]:
        """
        Get all memberships for a business.

        Args:
            business_id: Business ID

        Returns:
            List of BusinessMember objects for the business
        """
        return (
            self.db.query(BusinessMember)
            .filter(BusinessMember.business_id == business_id)
            .order_by(BusinessMember.id)
            .all()
        )

    def get_user_memberships(self, user_id: str) -> list[BusinessMember]:
        """
        Get all memberships for a user (all businesses they belong to).

        Args:
            user_id: User ID

        Returns:
            List of BusinessMember objects for the user
        """
        return (
            self.db.query(BusinessMember)
            .filter(BusinessMember.user_id == user_id)
            .all()
        )

    def get_user_business_ids(self, user_id: str) -> frozenset[int]:
        """IDs of every business the user belongs to"""
        rows = (
            self.db.query(BusinessMember.business_id)
            .filter(BusinessMember.user_id == user_id)
            .all()
        )
        return frozenset(row[0] for row in rows)

    def create(self, membership: BusinessMember, commit: bool = True) -> BusinessMember:
        """
        Create a new business membership.

        Args:
            membership: BusinessMember object to create
            commit: Commit immediately (False to join a larger unit of work)

        Returns:
            Created BusinessMember object with ID populated

        Raises:
            IntegrityError: If (business_id, user_id) already exists
        """
        self.db.add(membership)
        if commit:
            self.db.commit()
            self.db.refresh(membership)
        else:
            self.db.flush()
        return membership

    def delete(self, membership: BusinessMember) -> None:
        """
        Remove a user from a business.

        Args:
            membership: BusinessMember object to delete
        """
        self.db.delete(membership)
        self.db.commit()

    def get_owner(self, business_id: int) -> BusinessMember | None:
        """
        Get the owner membership for a business.

        Args:
            business_id: Business ID

        Returns:
            BusinessMember with OWNER role or None
        """
        return (
            self.db.query(BusinessMember)
            .filter(
                BusinessMember.business_id == business_id,
                BusinessMember.role == BusinessRole.OWNER,
            )
            .first()
        )
