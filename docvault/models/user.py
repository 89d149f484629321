"""
User Pydantic Models
Request/response schemas for user management
"""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from docvault.models.auth import UserResponse
from docvault.models.common import Pagination

ROLE_PATTERN = "^(admin|editor|viewer)$"


class UserCreate(BaseModel):
    """Admin user creation schema"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: str = Field("viewer", pattern=ROLE_PATTERN)
    is_active: bool = True


class UserUpdate(BaseModel):
    """Admin user update schema"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, pattern=ROLE_PATTERN)
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=8, max_length=100)


class UserListResponse(BaseModel):
    """User list response schema"""
    users: List[UserResponse]
    pagination: Pagination
