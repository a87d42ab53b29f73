from typing import Optional
from loguru import logger
from sqlalchemy.orm import Session

from bookkeeping.core.exceptions import NotFoundException
from bookkeeping.core.guards import enforce_guard
from bookkeeping.models.access_context import AccessContext, RecordOwnership
from bookkeeping.models.document import Document
from bookkeeping.models.role import Action, Resource
from bookkeeping.repositories.document_repository import DocumentRepository
from bookkeeping.schemas.document_schemas import DocumentCreate, DocumentUpdate


def document_ownership(document: Document) -> RecordOwnership:
    return RecordOwnership(owner_id=document.uploaded_by, business_id=document.business_id)


class DocumentService:
    """Service layer for document metadata"""

    def __init__(self, db: Session):
        self.db = db
        self.document_repo = DocumentRepository(db)

    def _get(self, document_id: int) -> Document:
        document = self.document_repo.get_by_id(document_id)
        if not document:
            raise NotFoundException(f"Document {document_id} not found")
        return document

    def register_document(self, data: DocumentCreate, context: AccessContext) -> Document:
        """
        Record an uploaded file in the current business.

        Raises:
            ForbiddenException: If user may not add documents to the business
            UpgradeRequiredException: If the plan lacks document_upload
        """
        enforce_guard(
            context,
            Resource.DOCUMENT,
            Action.CREATE,
            RecordOwnership(business_id=context.business_id),
            feature="document_upload",
        )

        document = Document(
            business_id=context.business_id,
            uploaded_by=context.user_id,
            **data.model_dump(),
        )
        document = self.document_repo.create(document)
        logger.info(f"Document {document.id} registered in business {document.business_id}")
        return document

    def get_documents(
        self, context: AccessContext, category: Optional[str] = None
    ) -> list[Document]:
        """List documents of the current business"""
        enforce_guard(
            context,
            Resource.DOCUMENT,
            Action.READ,
            RecordOwnership(business_id=context.business_id),
        )
        return self.document_repo.get_by_business(context.business_id, category)

    def get_document(self, document_id: int, context: AccessContext) -> Document:
        """Get document metadata by ID"""
        document = self._get(document_id)
        enforce_guard(context, Resource.DOCUMENT, Action.READ, document_ownership(document))
        return document

    def update_document(
        self, document_id: int, data: DocumentUpdate, context: AccessContext
    ) -> Document:
        """Rename or recategorize a document"""
        document = self._get(document_id)
        enforce_guard(context, Resource.DOCUMENT, Action.UPDATE, document_ownership(document))

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(document, field, value)

        return self.document_repo.update(document)

    def delete_document(self, document_id: int, context: AccessContext) -> None:
        """
        Delete document metadata.

        The stored file is not touched.
        """
        document = self._get(document_id)
        enforce_guard(context, Resource.DOCUMENT, Action.DELETE, document_ownership(document))

        self.document_repo.delete(document)
        logger.info(f"Document {document_id} deleted by {context.user_id}")
