"""
Ingestion Pydantic Models
Request/response schemas for ingestion job tracking
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from docvault.models.common import Pagination

STATUS_PATTERN = "^(pending|processing|completed|failed)$"


class JobResponse(BaseModel):
    """Ingestion job response"""
    id: uuid.UUID
    document_id: uuid.UUID
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    model_config = {"from_attributes": True}


class JobUpdate(BaseModel):
    """Manual status change"""
    status: str = Field(..., pattern=STATUS_PATTERN)
    error_message: Optional[str] = None


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    pagination: Pagination
