from typing import Optional
from sqlalchemy.orm import Session
from bookkeeping.models.document import Document


class DocumentRepository:
    """Repository for Document metadata"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, document_id: int) -> Optional[Document]:
        """Get document by ID"""
        return self.db.query(Document).filter(Document.id == document_id).first()

    def get_by_business(self, business_id: int, category: Optional[str] = None) -> list[Document]:
        """Get documents of a business, newest first"""
        query = self.db.query(Document).filter(Document.business_id == business_id)
        if category is not None:
            query = query.filter(Document.category == category)
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def create(self, document: Document) -> Document:
        """Register a new document"""
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        return document

    def update(self, document: Document) -> Document:
        """Update document metadata"""
        self.db.commit()
        self.db.refresh(document)
        return document

    def delete(self, document: Document) -> None:
        """Delete document metadata"""
        self.db.delete(document)
        self.db.commit()
