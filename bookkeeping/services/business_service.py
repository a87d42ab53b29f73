from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.business import Business
from bookkeeping.models.business_member import BusinessMember
from bookkeeping.models.role import Action, BusinessRole, Resource
from bookkeeping.models.transaction import TransactionStatus
from bookkeeping.repositories.business_member_repository import BusinessMemberRepository
from bookkeeping.repositories.business_repository import BusinessRepository
from bookkeeping.repositories.transaction_repository import TransactionRepository
from bookkeeping.repositories.user_repository import UserRepository
from bookkeeping.schemas.business_schemas import (
    BusinessCreate,
    BusinessMemberAdd,
    BusinessSubscriptionUpdate,
    BusinessUpdate,
)


def business_ownership(business: Business) -> RecordOwnership:
    return RecordOwnership(owner_id=business.owner_id, business_id=business.id)


class BusinessService:
    """Service layer for business management business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.business_repo = BusinessRepository(db)
        self.member_repo = BusinessMemberRepository(db)
        self.user_repo = UserRepository(db)
        self.transaction_repo = TransactionRepository(db)

    def _get(self, business_id: int) -> Business:
        business = self.business_repo.get_by_id(business_id)
        if not business:
            raise NotFoundException(f"Business {business_id} not found")
        return business

    def list_businesses(self, context: AccessContext) -> list[dict]:
        """
        List businesses visible to the user.

        Members see the businesses they belong to; admins see all of them.

        Returns:
            List of businesses with the user's role in each
        """
        enforce_guard(
            context,
            Resource.BUSINESS,
            Action.READ,
            RecordOwnership(owner_id=context.user_id),
        )

        if context.is_admin():
            businesses = self.business_repo.get_all()
        else:
            businesses = self.business_repo.get_for_user(context.user_id)

        roles = {
            m.business_id: m.role for m in self.member_repo.get_user_memberships(context.user_id)
        }

        result = []
        for business in businesses:
            result.append(
                {
                    "id": business.id,
                    "name": business.name,
                    "owner_id": business.owner_id,
                    "business_type": business.business_type,
                    "status": business.status,
                    "subscription_tier": business.subscription_tier,
                    "created_at": business.created_at,
                    "updated_at": business.updated_at,
                    "role": roles.get(business.id),
                }
            )
        return result

    def create_business(self, data: BusinessCreate, context: AccessContext) -> Business:
        """
        Create a business owned by the caller.

        The owner membership is created in the same unit of work.

        Raises:
            ForbiddenException: If the role may not create businesses
        """
        enforce_guard(context, Resource.BUSINESS, Action.CREATE)

        business = Business(
            name=data.name,
            owner_id=context.user_id,
            business_type=data.business_type,
            status="active",
        )
        self.business_repo.create(business)
        self.member_repo.create(
            BusinessMember(
                business_id=business.id,
                user_id=context.user_id,
                role=BusinessRole.OWNER,
            ),
            commit=False,
        )
        self.db.commit()
        self.db.refresh(business)

        logger.info(f"Business {business.id} created by user {context.user_id}")
        return business

    def get_business(self, business_id: int, context: AccessContext) -> Business:
        """
        Get business details.

        Raises:
            NotFoundException: If business not found
            ForbiddenException: If user has no access to it
        """
        business = self._get(business_id)
        enforce_guard(context, Resource.BUSINESS, Action.READ, business_ownership(business))
        return business

    def update_business(
        self, business_id: int, data: BusinessUpdate, context: AccessContext
    ) -> Business:
        """Update business details (owner, assigned accountant or admin)"""
        business = self._get(business_id)
        enforce_guard(context, Resource.BUSINESS, Action.UPDATE, business_ownership(business))

        if data.name is not None:
            business.name = data.name
        if data.business_type is not None:
            business.business_type = data.business_type
        if data.status is not None:
            business.status = data.status

        return self.business_repo.update(business)

    def update_subscription(
        self, business_id: int, data: BusinessSubscriptionUpdate, context: AccessContext
    ) -> Business:
        """
        Change the plan of a business.

        Plan changes are not scoped to a record the caller owns, so no
        ownership is offered to the decider: only the admin bypass grants it.
        """
        business = self._get(business_id)
        enforce_guard(context, Resource.BUSINESS, Action.UPDATE)

        business.subscription_tier = data.subscription_tier
        business = self.business_repo.update(business)
        logger.info(
            f"Business {business.id} moved to {data.subscription_tier.value} plan by user {context.user_id}"
        )
        return business

    def delete_business(self, business_id: int, context: AccessContext) -> None:
        """Delete a business and all its data"""
        business = self._get(business_id)
        enforce_guard(context, Resource.BUSINESS, Action.DELETE, business_ownership(business))

        self.business_repo.delete(business)
        logger.info(f"Business {business_id} deleted by user {context.user_id}")

    def get_summary(self, business_id: int, context: AccessContext) -> dict:
        """Headline figures of a business (basic_dashboard feature)"""
        business = self._get(business_id)
        enforce_guard(
            context,
            Resource.BUSINESS,
            Action.READ,
            business_ownership(business),
            feature="basic_dashboard",
        )

        totals = self.transaction_repo.totals_by_type(business.id)
        _, transaction_count = self.transaction_repo.get_with_filters(business.id, limit=0)
        _, pending = self.transaction_repo.get_with_filters(
            business.id, status=TransactionStatus.PENDING, limit=0
        )
        income = totals["income"]
        expenses = totals["expense"]

        return {
            "business_id": business.id,
            "total_income": income,
            "total_expenses": expenses,
            "net_income": income - expenses,
            "transaction_count": transaction_count,
            "pending_transactions": pending,
            "member_count": len(self.member_repo.get_business_members(business.id)),
        }

    def get_members(self, business_id: int, context: AccessContext) -> list[dict]:
        """
        Get all members of a business with user details.

        Returns:
            List of members with user info
        """
        business = self._get(business_id)
        enforce_guard(context, Resource.BUSINESS, Action.READ, business_ownership(business))

        result = []
        for membership in self.member_repo.get_business_members(business.id):
            user = self.user_repo.get_by_id(membership.user_id)
            result.append(
                {
                    "id": membership.id,
                    "user_id": membership.user_id,
                    "email": user.email if user else None,
                    "role": membership.role,
                    "created_at": membership.created_at,
                }
            )
        return result

    def add_member(
        self, business_id: int, data: BusinessMemberAdd, context: AccessContext
    ) -> dict:
        """
        Add a user (typically an accountant) to a business.

        Membership changes are proven by business ownership alone: only
        the owner's user ID is offered to the decider, so members cannot
        manage other members.

        Raises:
            ForbiddenException: If caller is not the owner or an admin
            NotFoundException: If the user does not exist
            ValidationException: If already a member or role is OWNER
        """
        business = self._get(business_id)
        enforce_guard(
            context,
            Resource.BUSINESS,
            Action.UPDATE,
            RecordOwnership(owner_id=business.owner_id),
        )

        if data.role == BusinessRole.OWNER:
            raise ValidationException("A business has a single owner")

        user = self.user_repo.get_by_id(data.user_id)
        if not user:
            raise NotFoundException(f"User {data.user_id} not found")

        if self.member_repo.get_membership(user.id, business.id):
            raise ValidationException(f"User {data.user_id} is already a member")

        membership = self.member_repo.create(
            BusinessMember(business_id=business.id, user_id=user.id, role=data.role)
        )
        logger.info(f"User {user.id} added to business {business.id} by {context.user_id}")

        return {
            "id": membership.id,
            "user_id": membership.user_id,
            "email": user.email,
            "role": membership.role,
            "created_at": membership.created_at,
        }

    def remove_member(self, business_id: int, user_id: str, context: AccessContext) -> None:
        """
        Remove a member from a business.

        Raises:
            ForbiddenException: If caller is not the owner or an admin
            NotFoundException: If membership not found
            ValidationException: If trying to remove the owner
        """
        business = self._get(business_id)
        enforce_guard(
            context,
            Resource.BUSINESS,
            Action.UPDATE,
            RecordOwnership(owner_id=business.owner_id),
        )

        membership = self.member_repo.get_membership(user_id, business.id)
        if not membership:
            raise NotFoundException("Member not found in this business")

        if membership.role == BusinessRole.OWNER:
            raise ValidationException("Cannot remove owner from business")

        self.member_repo.delete(membership)
        logger.info(f"User {user_id} removed from business {business.id} by {context.user_id}")
