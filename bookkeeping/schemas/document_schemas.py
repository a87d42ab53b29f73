from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional

# Limits of the hosted storage bucket the files are uploaded to
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/jpeg",
        "image/jpg",
        "image/png",
    }
)


class DocumentCreate(BaseModel):
    """Metadata of a file already uploaded to storage"""

    filename: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=1024)
    file_size: int = Field(..., ge=0, le=MAX_DOCUMENT_SIZE)
    mime_type: str = Field(..., min_length=1, max_length=255)
    category: str = Field("other", min_length=1, max_length=100)

    @field_validator("mime_type")
    @classmethod
    def check_mime_type(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ALLOWED_MIME_TYPES:
            raise ValueError(f"Unsupported file type: {v}")
        return v


class DocumentUpdate(BaseModel):
    """Schema for updating document metadata"""

    filename: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)


class DocumentResponse(BaseModel):
    """Schema for document response"""

    model_config = {"from_attributes": True}

    id: int
    business_id: int
    uploaded_by: str
    filename: str
    file_path: str
    file_size: int
    mime_type: str
    category: Optional[str]
    created_at: datetime
    updated_at: datetime
