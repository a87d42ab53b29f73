from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context, get_business_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.models.transaction import TransactionStatus, TransactionType
from bookkeeping.services.transaction_service import TransactionService
from bookkeeping.schemas.transaction_schemas import (
    TransactionCreate,
    TransactionUpdate,
    TransactionReview,
    TransactionResponse,
    TransactionListResponse,
)

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Record a transaction in the current business (X-Business-Id).

    - Amount is positive; type says income or expense
    - New transactions start as pending review
    """
    service = TransactionService(db)
    return service.create_transaction(transaction_data, context)


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    type: Optional[TransactionType] = Query(None, description="income or expense"),
    category: Optional[str] = Query(None, description="Filter by category"),
    status: Optional[TransactionStatus] = Query(None, description="Filter by review status"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    List transactions of the current business with optional filters.

    Results sorted by date (newest first).
    """
    service = TransactionService(db)
    transactions, total = service.get_transactions(
        context=context,
        start_date=start_date,
        end_date=end_date,
        type=type,
        category=category,
        status=status,
        limit=limit,
        offset=offset,
    )
    return TransactionListResponse(transactions=transactions, total=total)


@router.get("/export", response_class=Response)
def export_transactions(
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Export transactions of the current business as CSV.

    - Requires the data_export feature (basic plan or higher)
    """
    service = TransactionService(db)
    content = service.export_transactions(context, start_date, end_date)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get a specific transaction by ID"""
    service = TransactionService(db)
    return service.get_transaction(transaction_id, context)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Update a transaction.

    - Only provided fields are updated (partial update)
    - Editing figures of an approved transaction sends it back for review
    """
    service = TransactionService(db)
    return service.update_transaction(transaction_id, transaction_data, context)


@router.post("/{transaction_id}/review", response_model=TransactionResponse)
def review_transaction(
    transaction_id: int,
    review: TransactionReview,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Approve or reject a transaction.

    - Requires an accountant of the business or an admin
    """
    service = TransactionService(db)
    return service.review_transaction(transaction_id, review, context)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Delete a transaction"""
    service = TransactionService(db)
    service.delete_transaction(transaction_id, context)
