import datetime
from pydantic import BaseModel, Field
from typing import Optional
from bookkeeping.models.transaction import TransactionStatus, TransactionType


class TransactionCreate(BaseModel):
    """Schema for recording a transaction in the current business"""

    amount: float = Field(..., gt=0, description="Always positive; direction comes from type")
    type: TransactionType
    date: datetime.date
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)


class TransactionUpdate(BaseModel):
    """Schema for updating a transaction"""

    amount: Optional[float] = Field(None, gt=0)
    type: Optional[TransactionType] = None
    date: Optional[datetime.date] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)


class TransactionReview(BaseModel):
    """Approve or reject a transaction"""

    status: TransactionStatus = Field(..., description="approved or rejected")


class TransactionResponse(BaseModel):
    """Schema for transaction response"""

    model_config = {"from_attributes": True}

    id: int
    business_id: int
    created_by: str
    amount: float
    type: TransactionType
    date: datetime.date
    category: Optional[str]
    description: Optional[str]
    status: TransactionStatus
    approved_by: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TransactionListResponse(BaseModel):
    """Schema for list of transactions"""

    transactions: list[TransactionResponse]
    total: int
