"""
Version Manager
Sequential document versions kept in step with the document's current file
"""

import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.exceptions import ConflictException, NotFoundException
from docvault.core.logging import get_logger
from docvault.db.models import Document, DocumentVersion
from docvault.storage.client import StoredFile

logger = get_logger(__name__)


class VersionManager:
    """Create and look up document versions"""

    @staticmethod
    async def next_version_number(db: AsyncSession, document_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.max(DocumentVersion.version_number)).where(
                DocumentVersion.document_id == document_id
            )
        )
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    @staticmethod
    async def create_version(
        db: AsyncSession,
        document: Document,
        stored_file: StoredFile,
        author_id: uuid.UUID,
        change_summary: Optional[str] = None,
    ) -> DocumentVersion:
        """
        Append a version and point the document at its file

        Both writes are flushed in the caller's transaction. Two writers
        racing for the same number collide on the unique constraint.

        Raises:
            ConflictException: Another version with this number was written first
        """
        number = await VersionManager.next_version_number(db, document.id)

        version = DocumentVersion(
            document_id=document.id,
            version_number=number,
            file_path=stored_file.path,
            created_by=author_id,
            change_summary=change_summary,
        )
        db.add(version)

        document.file_path = stored_file.path
        document.file_type = stored_file.content_type
        document.file_size = stored_file.size

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Version {number} of document {document.id} was taken concurrently")
            raise ConflictException(
                "A newer version was uploaded at the same time, please retry",
                details={"document_id": str(document.id), "version_number": number},
            )

        logger.info(f"Created version {number} of document {document.id}")
        return version

    @staticmethod
    async def list_versions(db: AsyncSession, document_id: uuid.UUID) -> List[DocumentVersion]:
        """All versions of a document in ascending order"""
        result = await db.execute(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_version(
        db: AsyncSession,
        document_id: uuid.UUID,
        version_number: int,
    ) -> DocumentVersion:
        result = await db.execute(
            select(DocumentVersion).where(
                DocumentVersion.document_id == document_id,
                DocumentVersion.version_number == version_number,
            )
        )
        version = result.scalar_one_or_none()
        if version is None:
            raise NotFoundException("Version")
        return version

    @staticmethod
    async def latest_version(
        db: AsyncSession,
        document_id: uuid.UUID,
    ) -> Optional[DocumentVersion]:
        result = await db.execute(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
