"""
Document Service
Document lifecycle: upload, listing, updates, soft and permanent deletion
"""

import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.exceptions import NotFoundException
from docvault.core.logging import get_logger
from docvault.core.permissions import PermissionChecker
from docvault.db.models import (
    Document,
    DocumentPermission,
    DocumentTag,
    DocumentVersion,
    IngestionJob,
    User,
)
from docvault.monitoring.metrics import documents_uploaded_total
from docvault.services.ingestion import IngestionTracker
from docvault.services.versions import VersionManager
from docvault.storage.client import StoredFile, remove_file

logger = get_logger(__name__)

INITIAL_VERSION_SUMMARY = "Initial version"


class DocumentService:
    """Multi-step document operations, each committed as one transaction"""

    @staticmethod
    async def get_document(
        db: AsyncSession,
        document_id: uuid.UUID,
        include_deleted: bool = False,
    ) -> Document:
        """Fetch a document; soft-deleted ones count as missing unless asked for"""
        result = await db.execute(select(Document).where(Document.id == document_id))
        document = result.scalar_one_or_none()

        if document is None or (document.is_deleted and not include_deleted):
            raise NotFoundException("Document")
        return document

    @staticmethod
    async def create_document(
        db: AsyncSession,
        owner: User,
        stored_file: StoredFile,
        title: str,
        description: Optional[str] = None,
        tags: Iterable[str] = (),
    ) -> Tuple[Document, DocumentVersion, IngestionJob]:
        """
        Create a document with version 1 and a pending ingestion job

        The stored file is removed again if the transaction fails.
        """
        try:
            document = Document(
                title=title,
                description=description,
                file_path=stored_file.path,
                file_type=stored_file.content_type,
                file_size=stored_file.size,
                created_by=owner.id,
                is_deleted=False,
            )
            document.set_tags(tags)
            db.add(document)
            await db.flush()

            version = await VersionManager.create_version(
                db,
                document,
                stored_file,
                author_id=owner.id,
                change_summary=INITIAL_VERSION_SUMMARY,
            )
            job = await IngestionTracker.create_job(db, document.id)
            await db.commit()
        except Exception:
            await db.rollback()
            remove_file(stored_file.path)
            raise

        documents_uploaded_total.labels(kind="document").inc()
        logger.info(f"Document {document.id} created by {owner.id} ({stored_file.size} bytes)")
        return document, version, job

    @staticmethod
    async def upload_version(
        db: AsyncSession,
        document: Document,
        author: User,
        stored_file: StoredFile,
        change_summary: Optional[str] = None,
    ) -> Tuple[DocumentVersion, IngestionJob]:
        """Add the next version and a pending ingestion job in one transaction"""
        try:
            version = await VersionManager.create_version(
                db,
                document,
                stored_file,
                author_id=author.id,
                change_summary=change_summary,
            )
            job = await IngestionTracker.create_job(db, document.id)
            await db.commit()
        except Exception:
            await db.rollback()
            remove_file(stored_file.path)
            raise

        documents_uploaded_total.labels(kind="version").inc()
        return version, job

    @staticmethod
    async def list_documents(
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Tuple[List[Document], int]:
        """
        Non-deleted documents visible to the user, newest first

        `search` matches title, description or an exact tag. `tags` keeps
        documents carrying any of the given tags.
        """
        filters = [
            Document.is_deleted.is_(False),
            PermissionChecker.accessible_document_filter(user),
        ]

        if search:
            escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            filters.append(
                or_(
                    Document.title.ilike(pattern, escape="\\"),
                    Document.description.ilike(pattern, escape="\\"),
                    Document.id.in_(
                        select(DocumentTag.document_id).where(DocumentTag.tag == search)
                    ),
                )
            )

        if tags:
            filters.append(
                Document.id.in_(
                    select(DocumentTag.document_id).where(DocumentTag.tag.in_(tags))
                )
            )

        total = (
            await db.execute(select(func.count()).select_from(Document).where(*filters))
        ).scalar_one()

        result = await db.execute(
            select(Document)
            .where(*filters)
            .order_by(Document.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def update_document(
        db: AsyncSession,
        document: Document,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Document:
        if title is not None:
            document.title = title
        if description is not None:
            document.description = description
        if tags is not None:
            document.set_tags(tags)

        await db.flush()
        logger.info(f"Document {document.id} metadata updated")
        return document

    @staticmethod
    async def soft_delete(db: AsyncSession, document: Document) -> None:
        document.is_deleted = True
        await db.flush()
        logger.info(f"Document {document.id} soft deleted")

    @staticmethod
    async def permanent_delete(db: AsyncSession, document: Document) -> int:
        """
        Remove a document and everything hanging off it

        Rows go in one transaction; files are unlinked afterwards and a
        failed unlink is only logged.

        Returns:
            Number of files removed from disk
        """
        document_id = document.id
        result = await db.execute(
            select(DocumentVersion.file_path).where(DocumentVersion.document_id == document_id)
        )
        paths = {path for path in result.scalars().all()}
        paths.add(document.file_path)

        try:
            await db.execute(delete(DocumentVersion).where(DocumentVersion.document_id == document_id))
            await db.execute(
                delete(DocumentPermission).where(DocumentPermission.document_id == document_id)
            )
            await db.execute(delete(IngestionJob).where(IngestionJob.document_id == document_id))
            await db.delete(document)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        removed = sum(1 for path in paths if remove_file(path))
        logger.info(
            f"Document {document_id} permanently deleted ({removed}/{len(paths)} files removed)"
        )
        return removed
