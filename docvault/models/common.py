"""
Common Pydantic Models
Shared schemas used across the application
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorItem(BaseModel):
    """Single field-level validation error"""
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error envelope"""
    success: bool = False
    message: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    errors: Optional[List[ErrorItem]] = Field(None, description="Field-level errors")


class SuccessResponse(BaseModel):
    """Standard success envelope"""
    success: bool = True
    message: str
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Health status: healthy or degraded")
    version: str = Field(..., description="Application version")
    timestamp: Optional[str] = Field(None, description="Response timestamp")
    services: Optional[Dict[str, str]] = Field(None, description="Service health status")


class Pagination(BaseModel):
    """Page metadata returned with list endpoints"""
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def success(message: str, data: Any = None) -> Dict[str, Any]:
    """Wrap a payload in the success envelope"""
    return SuccessResponse(message=message, data=data).model_dump(mode="json")
