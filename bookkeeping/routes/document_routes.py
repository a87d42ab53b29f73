from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bookkeeping.database import get_db
from bookkeeping.dependencies import get_identified_context, get_business_context
from bookkeeping.models.access_context import AccessContext
from bookkeeping.services.document_service import DocumentService
from bookkeeping.schemas.document_schemas import (
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
)

router = APIRouter()


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def register_document(
    data: DocumentCreate,
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """
    Register an uploaded file with the current business.

    - The file must already be in storage; only metadata is stored here
    - Requires the document_upload feature (basic plan or higher)
    - Max 10MB; PDF, Word, Excel, JPEG and PNG only
    """
    service = DocumentService(db)
    return service.register_document(data, context)


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    category: Optional[str] = Query(None, description="Filter by category"),
    context: AccessContext = Depends(get_business_context),
    db: Session = Depends(get_db),
):
    """List documents of the current business, newest first"""
    service = DocumentService(db)
    return service.get_documents(context, category)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Get document metadata by ID"""
    service = DocumentService(db)
    return service.get_document(document_id, context)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: int,
    data: DocumentUpdate,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """Rename or recategorize a document"""
    service = DocumentService(db)
    return service.update_document(document_id, data, context)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    context: AccessContext = Depends(get_identified_context),
    db: Session = Depends(get_db),
):
    """
    Delete a document.

    - Clients only (accountants cannot delete client documents)
    """
    service = DocumentService(db)
    service.delete_document(document_id, context)
