from datetime import date
from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException, ValidationException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.role import Action, Resource
from bookkeeping.models.transaction import Transaction, TransactionStatus, TransactionType
from bookkeeping.repositories.transaction_repository import TransactionRepository
from bookkeeping.schemas.transaction_schemas import (
    TransactionCreate,
    TransactionReview,
    TransactionUpdate,
)
from bookkeeping.services.report_builder import transactions_csv, transactions_frame

# Edits to these fields send an approved transaction back for review
REVIEWED_FIELDS = ("amount", "type", "date", "category")


def transaction_ownership(transaction: Transaction) -> RecordOwnership:
    return RecordOwnership(owner_id=transaction.created_by, business_id=transaction.business_id)


class TransactionService:
    """Service layer for transaction business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)

    def _get(self, transaction_id: int) -> Transaction:
        transaction = self.transaction_repo.get_by_id(transaction_id)
        if not transaction:
            raise NotFoundException(f"Transaction {transaction_id} not found")
        return transaction

    def create_transaction(
        self, transaction_data: TransactionCreate, context: AccessContext
    ) -> Transaction:
        """
        Record a transaction in the current business.

        Only the business is offered as ownership proof: the record does
        not exist yet, so the caller must belong to the business.

        Raises:
            ForbiddenException: If user may not add transactions to the business
        """
        enforce_guard(
            context,
            Resource.TRANSACTION,
            Action.CREATE,
            RecordOwnership(business_id=context.business_id),
        )

        transaction = Transaction(
            business_id=context.business_id,
            created_by=context.user_id,
            amount=transaction_data.amount,
            type=transaction_data.type,
            date=transaction_data.date,
            category=transaction_data.category,
            description=transaction_data.description,
            status=TransactionStatus.PENDING,
        )
        transaction = self.transaction_repo.create(transaction)
        logger.info(
            f"Transaction {transaction.id} recorded in business {transaction.business_id} by {context.user_id}"
        )
        return transaction

    def get_transaction(self, transaction_id: int, context: AccessContext) -> Transaction:
        """
        Get transaction by ID with ownership verification.

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If user has no access to it
        """
        transaction = self._get(transaction_id)
        enforce_guard(
            context, Resource.TRANSACTION, Action.READ, transaction_ownership(transaction)
        )
        return transaction

    def get_transactions(
        self,
        context: AccessContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        status: Optional[TransactionStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """
        Get transactions of the current business with filters.

        Returns:
            Tuple of (transactions, total_count)
        """
        enforce_guard(
            context,
            Resource.TRANSACTION,
            Action.READ,
            RecordOwnership(business_id=context.business_id),
        )

        return self.transaction_repo.get_with_filters(
            business_id=context.business_id,
            start_date=start_date,
            end_date=end_date,
            type=type,
            category=category,
            status=status,
            limit=limit,
            offset=offset,
        )

    def update_transaction(
        self, transaction_id: int, transaction_data: TransactionUpdate, context: AccessContext
    ) -> Transaction:
        """
        Update a transaction.

        Changing amount, type, date or category of an approved transaction
        sends it back to PENDING.

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If user may not update it
        """
        transaction = self._get(transaction_id)
        enforce_guard(
            context, Resource.TRANSACTION, Action.UPDATE, transaction_ownership(transaction)
        )

        changes = transaction_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(transaction, field, value)

        if transaction.status == TransactionStatus.APPROVED and any(
            field in changes for field in REVIEWED_FIELDS
        ):
            transaction.status = TransactionStatus.PENDING
            transaction.approved_by = None

        return self.transaction_repo.update(transaction)

    def delete_transaction(self, transaction_id: int, context: AccessContext) -> None:
        """
        Delete a transaction.

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If user may not delete it
        """
        transaction = self._get(transaction_id)
        enforce_guard(
            context, Resource.TRANSACTION, Action.DELETE, transaction_ownership(transaction)
        )

        self.transaction_repo.delete(transaction)
        logger.info(f"Transaction {transaction_id} deleted by {context.user_id}")

    def review_transaction(
        self, transaction_id: int, review: TransactionReview, context: AccessContext
    ) -> Transaction:
        """
        Approve or reject a transaction (accountants of the business, admins).

        Raises:
            ValidationException: If the requested status is PENDING
        """
        transaction = self._get(transaction_id)
        enforce_guard(
            context,
            Resource.TRANSACTION,
            Action.APPROVE,
            RecordOwnership(business_id=transaction.business_id),
        )

        if review.status == TransactionStatus.PENDING:
            raise ValidationException("Review status must be approved or rejected")

        transaction.status = review.status
        transaction.approved_by = context.user_id
        transaction = self.transaction_repo.update(transaction)
        logger.info(f"Transaction {transaction_id} {review.status.value} by {context.user_id}")
        return transaction

    def export_transactions(
        self,
        context: AccessContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """
        Export transactions of the current business as CSV (data_export feature).

        Returns:
            CSV text
        """
        enforce_guard(
            context,
            Resource.TRANSACTION,
            Action.EXPORT,
            RecordOwnership(business_id=context.business_id),
            feature="data_export",
        )

        transactions, _ = self.transaction_repo.get_with_filters(
            business_id=context.business_id,
            start_date=start_date,
            end_date=end_date,
            limit=None,
        )
        return transactions_csv(transactions_frame(transactions))
