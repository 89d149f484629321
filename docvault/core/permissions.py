"""
Permission Service
Document-level access control (ACL) enforcement
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.exceptions import (
    NotFoundException,
    PermissionException,
    ValidationException,
)
from docvault.core.logging import get_logger
from docvault.db.models import Document, DocumentPermission, User

logger = get_logger(__name__)


class PermissionChecker:
    """Check and enforce document-level permissions"""

    # Rank of each grant level; a grant satisfies every level at or below it
    LEVELS = {
        "read": 1,
        "write": 2,
        "admin": 3,
    }

    @staticmethod
    def level_satisfies(granted: str, required: str) -> bool:
        """Whether a stored grant level covers the required level"""
        try:
            return PermissionChecker.LEVELS[granted] >= PermissionChecker.LEVELS[required]
        except KeyError:
            return False

    @staticmethod
    async def get_user_role(db: AsyncSession, user_id: uuid.UUID) -> Optional[str]:
        """Get user's role from database"""
        result = await db.execute(select(User.role).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def has_permission(
        db: AsyncSession,
        user_id: uuid.UUID,
        document_id: uuid.UUID,
        required_level: str,
        user_role: Optional[str] = None,
    ) -> bool:
        """
        Check if user holds at least `required_level` on a document

        Args:
            db: Database session
            user_id: User to check
            document_id: Document to check
            required_level: read, write or admin
            user_role: User's role (optional, will fetch if not provided)

        Returns:
            True if user has permission, False otherwise
        """
        if required_level not in PermissionChecker.LEVELS:
            raise ValidationException(
                f"Unknown permission level '{required_level}'",
                details={"allowed": list(PermissionChecker.LEVELS)},
            )

        if user_role is None:
            user_role = await PermissionChecker.get_user_role(db, user_id)

        # Admin bypass - admins have all permissions
        if user_role == "admin":
            logger.debug(f"Admin {user_id} granted {required_level} on {document_id}")
            return True

        result = await db.execute(
            select(Document.created_by).where(Document.id == document_id)
        )
        creator_id = result.scalar_one_or_none()

        if creator_id is None:
            logger.debug(f"Document {document_id} not found, denying {user_id}")
            return False

        if creator_id == user_id:
            logger.debug(f"Creator {user_id} granted {required_level} on {document_id}")
            return True

        result = await db.execute(
            select(DocumentPermission.permission_type).where(
                DocumentPermission.document_id == document_id,
                DocumentPermission.user_id == user_id,
            )
        )
        granted = result.scalar_one_or_none()

        if granted is None:
            logger.debug(f"User {user_id} denied {required_level} on {document_id} (no grant)")
            return False

        allowed = PermissionChecker.level_satisfies(granted, required_level)
        logger.debug(
            f"User {user_id} {'granted' if allowed else 'denied'} {required_level} "
            f"on {document_id} (holds {granted})"
        )
        return allowed

    @staticmethod
    async def require_permission(
        db: AsyncSession,
        user_id: uuid.UUID,
        document_id: uuid.UUID,
        required_level: str,
        user_role: Optional[str] = None,
    ) -> None:
        """
        Require permission or raise exception

        Raises:
            PermissionException: If user doesn't have required permission
        """
        allowed = await PermissionChecker.has_permission(
            db, user_id, document_id, required_level, user_role
        )

        if not allowed:
            raise PermissionException(
                details={
                    "document_id": str(document_id),
                    "required_permission": required_level,
                },
            )

    @staticmethod
    async def set_permission(
        db: AsyncSession,
        document_id: uuid.UUID,
        user_id: uuid.UUID,
        permission_type: str,
    ) -> Tuple[DocumentPermission, bool]:
        """
        Grant or change a user's level on a document

        Returns:
            The permission row and whether it was newly created
        """
        if permission_type not in PermissionChecker.LEVELS:
            raise ValidationException(
                "Invalid permission type",
                details={"allowed": list(PermissionChecker.LEVELS)},
            )

        result = await db.execute(
            select(Document.created_by).where(Document.id == document_id)
        )
        creator_id = result.scalar_one_or_none()
        if creator_id is None:
            raise NotFoundException("Document")

        result = await db.execute(select(User.id).where(User.id == user_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundException("User")

        if creator_id == user_id:
            raise ValidationException("The document creator already has full access")

        result = await db.execute(
            select(DocumentPermission).where(
                DocumentPermission.document_id == document_id,
                DocumentPermission.user_id == user_id,
            )
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.permission_type = permission_type
            await db.flush()
            logger.info(
                f"Updated permission for user {user_id} on document {document_id} to {permission_type}"
            )
            return existing, False

        permission = DocumentPermission(
            document_id=document_id,
            user_id=user_id,
            permission_type=permission_type,
        )
        db.add(permission)
        await db.flush()
        logger.info(f"Granted {permission_type} to user {user_id} on document {document_id}")
        return permission, True

    @staticmethod
    async def remove_permission(
        db: AsyncSession,
        document_id: uuid.UUID,
        permission_id: uuid.UUID,
    ) -> None:
        """Delete a grant; a grant on another document counts as missing"""
        result = await db.execute(
            select(DocumentPermission).where(
                DocumentPermission.id == permission_id,
                DocumentPermission.document_id == document_id,
            )
        )
        permission = result.scalar_one_or_none()

        if permission is None:
            raise NotFoundException("Permission")

        await db.delete(permission)
        await db.flush()
        logger.info(f"Removed permission {permission_id} from document {document_id}")

    @staticmethod
    async def list_permissions(
        db: AsyncSession,
        document_id: uuid.UUID,
    ) -> List[Dict[str, Any]]:
        """List grants on a document with grantee details"""
        result = await db.execute(
            select(DocumentPermission, User)
            .join(User, User.id == DocumentPermission.user_id)
            .where(DocumentPermission.document_id == document_id)
            .order_by(DocumentPermission.created_at)
        )
        return [
            {
                "id": permission.id,
                "document_id": permission.document_id,
                "user_id": permission.user_id,
                "permission_type": permission.permission_type,
                "user_email": user.email,
                "user_name": user.full_name,
                "created_at": permission.created_at,
                "updated_at": permission.updated_at,
            }
            for permission, user in result.all()
        ]

    @staticmethod
    async def remove_user_grants(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Delete every grant held by a user"""
        result = await db.execute(
            delete(DocumentPermission).where(DocumentPermission.user_id == user_id)
        )
        return result.rowcount or 0

    @staticmethod
    def accessible_document_filter(user: User) -> Any:
        """
        SQL criterion selecting documents the user may at least read

        Admins see everything; other users see documents they created or
        hold any grant on.
        """
        if user.role == "admin":
            return true()

        return or_(
            Document.created_by == user.id,
            Document.id.in_(
                select(DocumentPermission.document_id).where(
                    DocumentPermission.user_id == user.id
                )
            ),
        )
