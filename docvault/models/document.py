"""
Document Pydantic Models
Request/response schemas for document endpoints
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from docvault.db.models import MAX_TAG_LENGTH
from docvault.models.common import Pagination


class DocumentResponse(BaseModel):
    """Document metadata response"""
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    file_type: str
    file_size: int
    created_by: uuid.UUID
    tags: List[str] = Field(default_factory=list)
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document) -> "DocumentResponse":
        """Create DocumentResponse from SQLAlchemy Document model"""
        return cls(
            id=document.id,
            title=document.title,
            description=document.description,
            file_type=document.file_type,
            file_size=document.file_size,
            created_by=document.created_by,
            tags=document.tag_list,
            is_deleted=document.is_deleted,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class VersionResponse(BaseModel):
    """Document version response"""
    id: uuid.UUID
    document_id: uuid.UUID
    version_number: int
    created_by: uuid.UUID
    change_summary: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentUpdate(BaseModel):
    """Document metadata update schema"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def check_tag_length(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None and any(len(t.strip()) > MAX_TAG_LENGTH for t in v):
            raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        return v


class DocumentCreated(BaseModel):
    """Response for a new upload"""
    document: DocumentResponse
    version: VersionResponse


class DocumentDetail(BaseModel):
    """Single document with its newest version"""
    document: DocumentResponse
    latest_version: Optional[VersionResponse] = None


class DocumentListResponse(BaseModel):
    """Document list response schema"""
    documents: List[DocumentResponse]
    pagination: Pagination
