"""
SQLAlchemy Database Models
"""

import uuid
from datetime import datetime
from typing import Any, Iterable, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docvault.db.base import Base, TimestampMixin, UUIDMixin, utcnow

USER_ROLES = ("admin", "editor", "viewer")
PERMISSION_TYPES = ("read", "write", "admin")
JOB_STATUSES = ("pending", "processing", "completed", "failed")
CONFIDENCE_LEVELS = ("high", "medium", "low", "none")
MAX_TAG_LENGTH = 100


class User(UUIDMixin, TimestampMixin, Base):
    """User SQLAlchemy model"""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="viewer")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class DocumentTag(Base):
    """Tag attached to a document"""

    __tablename__ = "document_tags"

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(String(MAX_TAG_LENGTH), primary_key=True, index=True)


class Document(UUIDMixin, TimestampMixin, Base):
    """Document SQLAlchemy model"""

    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    tags: Mapped[List[DocumentTag]] = relationship(
        DocumentTag,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tag_list(self) -> List[str]:
        return sorted(t.tag for t in self.tags)

    def set_tags(self, tags: Iterable[str]) -> None:
        """Replace the tag set, keeping rows for tags that survive"""
        wanted = normalize_tags(tags)
        self.tags = [t for t in self.tags if t.tag in wanted] + [
            DocumentTag(tag=tag)
            for tag in wanted
            if tag not in {t.tag for t in self.tags}
        ]


class DocumentVersion(UUIDMixin, Base):
    """Immutable snapshot of a document's file"""

    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_version_number"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id"), nullable=False, index=True
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    # Author is kept even if the user is later removed
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    change_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class DocumentPermission(UUIDMixin, TimestampMixin, Base):
    """Explicit per-user grant on a document"""

    __tablename__ = "document_permissions"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_permission_user"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    permission_type: Mapped[str] = mapped_column(String(10), nullable=False)


class IngestionJob(UUIDMixin, TimestampMixin, Base):
    """Processing-status record for a document"""

    __tablename__ = "ingestion_jobs"

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class QAHistory(UUIDMixin, Base):
    """Question asked by a user and the answer given"""

    __tablename__ = "qa_history"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[str] = mapped_column(String(10), nullable=False, default="none")
    sources: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Trim, drop empties and de-duplicate while keeping first-seen order"""
    seen: List[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen
