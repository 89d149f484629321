"""
Q&A Pydantic Models
Request/response schemas for the question answering endpoints
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from docvault.models.common import Pagination


class AskRequest(BaseModel):
    """Question submitted by a user"""
    question: str = Field("", max_length=2000)


class QASource(BaseModel):
    """Document that contributed to an answer"""
    document_id: uuid.UUID
    title: str
    excerpts: List[str] = Field(default_factory=list)


class AnswerResponse(BaseModel):
    """Answer with a confidence level and its sources"""
    answer: str
    confidence: str = Field(..., pattern="^(high|medium|low|none)$")
    sources: List[QASource] = Field(default_factory=list)


class QAHistoryResponse(BaseModel):
    """Stored question and answer"""
    id: uuid.UUID
    question: str
    answer: str
    confidence: str
    sources: List[QASource] = Field(default_factory=list)
    created_at: datetime

    model_config = {"from_attributes": True}


class QAHistoryListResponse(BaseModel):
    history: List[QAHistoryResponse]
    pagination: Pagination


class IndexResponse(BaseModel):
    """Result of indexing a document into the content store"""
    document_id: uuid.UUID
    title: str
    characters: int
