"""
Permission Pydantic Models
Request/response schemas for document access grants
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class PermissionGrant(BaseModel):
    """Grant or change a user's level on a document"""
    user_id: uuid.UUID
    permission_type: str = Field(..., pattern="^(read|write|admin)$")


class PermissionResponse(BaseModel):
    """Grant with grantee details"""
    id: uuid.UUID
    document_id: uuid.UUID
    user_id: uuid.UUID
    permission_type: str
    user_email: str
    user_name: str
    created_at: datetime
    updated_at: datetime
