from datetime import date
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from bookkeeping.models.transaction import Transaction, TransactionStatus, TransactionType


class TransactionRepository:
    """Repository for Transaction data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction"""
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID"""
        return self.db.query(Transaction).filter(Transaction.id == transaction_id).first()

    def get_with_filters(
        self,
        business_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        status: Optional[TransactionStatus] = None,
        limit: Optional[int] = 100,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """
        Get transactions of one business with filters.

        Args:
            business_id: Business ID for isolation
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            type: Optional income/expense filter
            category: Optional category filter
            status: Optional review status filter
            limit: Maximum number of results (None for all)
            offset: Pagination offset

        Returns:
            Tuple of (transactions list, total count)
        """
        query = self.db.query(Transaction).filter(Transaction.business_id == business_id)

        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)

        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)

        if type is not None:
            query = query.filter(Transaction.type == type)

        if category is not None:
            query = query.filter(Transaction.category == category)

        if status is not None:
            query = query.filter(Transaction.status == status)

        # Get total count before pagination
        total = query.count()

        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
        if limit is not None:
            query = query.limit(limit)
        transactions = query.offset(offset).all()

        return transactions, total

    def update(self, transaction: Transaction) -> Transaction:
        """Update a transaction"""
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def delete(self, transaction: Transaction) -> None:
        """Delete a transaction"""
        self.db.delete(transaction)
        self.db.commit()

    def totals_by_type(self, business_id: Optional[int] = None) -> dict[str, float]:
        """Sum amounts per transaction type, for one business or platform-wide"""
        query = self.db.query(Transaction.type, func.sum(Transaction.amount))
        if business_id is not None:
            query = query.filter(Transaction.business_id == business_id)
        rows = query.group_by(Transaction.type).all()
        totals = {t.value: 0.0 for t in TransactionType}
        for txn_type, amount in rows:
            totals[txn_type.value] = float(amount or 0)
        return totals

    def count_by_status(self, status: TransactionStatus) -> int:
        """Count transactions in a review status across all businesses"""
        return self.db.query(Transaction).filter(Transaction.status == status).count()
