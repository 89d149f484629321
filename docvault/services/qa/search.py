"""
Document Search
Keyword term-frequency search over cached document text
"""

import re
import uuid
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.cache import DocumentContentStore
from docvault.core.exceptions import NotFoundException
from docvault.core.logging import get_logger
from docvault.core.permissions import PermissionChecker
from docvault.db.models import Document, User
from docvault.services.versions import VersionManager
from docvault.storage.client import read_text

logger = get_logger(__name__)

MAX_CONTENT_CHARS = 5000
MAX_EXCERPTS = 2


async def index_document(
    db: AsyncSession,
    store: DocumentContentStore,
    document_id: uuid.UUID,
) -> Dict[str, Any]:
    """
    Load the latest version's text into the content store

    Raises:
        NotFoundException: Document missing, soft-deleted or without versions
    """
    result = await db.execute(select(Document).where(Document.id == document_id))
    document = result.scalar_one_or_none()
    if document is None or document.is_deleted:
        raise NotFoundException("Document")

    version = await VersionManager.latest_version(db, document_id)
    if version is None:
        raise NotFoundException("Document version")

    try:
        content = read_text(version.file_path, limit=MAX_CONTENT_CHARS)
    except OSError as e:
        logger.error(f"Error extracting text from {version.file_path}: {e}")
        content = ""

    author = await db.get(User, document.created_by)
    entry = {
        "id": str(document_id),
        "title": document.title,
        "content": content,
        "metadata": {
            "author": author.full_name if author else "Unknown",
            "created_at": document.created_at.isoformat(),
            "updated_at": document.updated_at.isoformat(),
            "tags": document.tag_list,
            "version_number": version.version_number,
        },
    }
    await store.set(str(document_id), entry)
    logger.debug(f"Indexed document {document_id} ({len(content)} chars)")
    return entry


def score_content(content: str, terms: List[str]) -> int:
    """Total occurrences of every query term in the content"""
    lowered = content.lower()
    return sum(len(re.findall(re.escape(term), lowered)) for term in terms)


def find_excerpts(content: str, terms: List[str], max_excerpts: int = MAX_EXCERPTS) -> List[str]:
    excerpts = []
    for line in re.split(r"\n+", content):
        if any(term in line.lower() for term in terms):
            excerpts.append(line.strip())
            if len(excerpts) >= max_excerpts:
                break
    return excerpts


async def search_documents(
    db: AsyncSession,
    store: DocumentContentStore,
    query: str,
    user: User,
    limit: int = 3,
) -> List[Dict[str, Any]]:
    """
    Rank the user's readable documents by term frequency

    Documents not yet in the store are indexed on the way.
    """
    terms = [term for term in query.lower().split() if term]
    if not terms:
        return []

    result = await db.execute(
        select(Document.id).where(
            Document.is_deleted.is_(False),
            PermissionChecker.accessible_document_filter(user),
        )
    )
    document_ids = list(result.scalars().all())

    results = []
    for document_id in document_ids:
        entry = await store.get(str(document_id))
        if entry is None:
            try:
                entry = await index_document(db, store, document_id)
            except NotFoundException:
                continue

        score = score_content(entry["content"], terms)
        if score <= 0:
            continue

        results.append(
            {
                "document_id": entry["id"],
                "title": entry["title"],
                "score": score,
                "excerpts": find_excerpts(entry["content"], terms),
                "metadata": entry["metadata"],
            }
        )

    results.sort(key=lambda r: r["score"], reverse=True)
    return results[:limit]
