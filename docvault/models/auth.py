"""
Authentication Pydantic Models
Request/response schemas for authentication endpoints
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserResponse(BaseModel):
    """Public view of a user"""
    id: uuid.UUID
    email: EmailStr
    first_name: str
    last_name: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    # Allow SQLAlchemy model to populate this response
    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    """Self-registration schema; new accounts are always viewers"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(BaseModel):
    """Login request schema"""
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own account"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=8, max_length=100)


class AuthData(BaseModel):
    """Payload returned by register and login"""
    user: UserResponse
    token: str
