"""
API Dependencies
Common dependencies for API routes
"""

import uuid
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ValidationException,
)
from docvault.core.permissions import PermissionChecker
from docvault.core.security import verify_access_token
from docvault.db.models import Document
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.services.documents import DocumentService


def parse_uuid(value: str, field: str = "id") -> uuid.UUID:
    """Parse a path/query id, answering 400 for malformed values"""
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationException(f"Invalid {field}", details={field: value})


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """
    Dependency to get current user from JWT token

    Args:
        authorization: Authorization header with Bearer token
        db: Database session

    Returns:
        Current authenticated user

    Raises:
        AuthenticationException: If token is invalid or user not found
    """
    if not authorization:
        raise AuthenticationException(message="Not authorized to access this route")

    if not authorization.startswith("Bearer "):
        raise AuthenticationException(message="Invalid authorization header format")

    token = authorization.split(" ", 1)[1].strip()

    payload = verify_access_token(token)

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationException(message="Invalid token. Please log in again.")

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationException(message="User not found")
    if not user.is_active:
        raise AuthenticationException(message="Your account has been deactivated")

    return user


def require_role(*roles: str) -> Callable:
    """Dependency factory restricting a route to the given global roles"""

    async def checker(current_user: UserModel = Depends(get_current_user)) -> UserModel:
        if current_user.role not in roles:
            raise AuthorizationException(
                message=f"User role {current_user.role} is not authorized to access this route",
                details={"required_roles": list(roles)},
            )
        return current_user

    return checker


def require_document_permission(level: str) -> Callable:
    """
    Dependency factory loading `{document_id}` and checking the caller's level

    A missing or soft-deleted document is a 404 before any permission check.
    """

    async def checker(
        document_id: str,
        current_user: UserModel = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ) -> Document:
        doc_id = parse_uuid(document_id, "document ID")
        document = await DocumentService.get_document(db, doc_id)
        await PermissionChecker.require_permission(
            db,
            current_user.id,
            document.id,
            level,
            user_role=current_user.role,
        )
        return document

    return checker
