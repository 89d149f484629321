"""
Q&A Service
Keyword placeholder for document question answering, plus answer history
"""

import uuid
from typing import Any, Dict, List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.cache import DocumentContentStore
from docvault.core.exceptions import NotFoundException
from docvault.core.logging import get_logger
from docvault.db.models import QAHistory, User
from docvault.monitoring.metrics import qa_questions_total
from docvault.services.qa.answers import canned_answer, generate_answer
from docvault.services.qa.search import index_document, search_documents

logger = get_logger(__name__)

__all__ = [
    "answer_question",
    "canned_answer",
    "clear_history",
    "delete_history_item",
    "generate_answer",
    "index_document",
    "list_history",
    "save_history",
    "search_documents",
]


async def answer_question(
    db: AsyncSession,
    store: DocumentContentStore,
    question: str,
    user: User,
) -> Dict[str, Any]:
    """
    Answer from the user's documents, falling back to canned rules

    Never raises: search failures and empty results both end in the
    canned answer.
    """
    try:
        results = await search_documents(db, store, question, user)
        if results:
            answer = generate_answer(question, results)
            sources = [
                {
                    "document_id": r["document_id"],
                    "title": r["title"],
                    "excerpts": r["excerpts"],
                }
                for r in results
            ]
            qa_questions_total.labels(confidence=answer["confidence"], source="documents").inc()
            return {"question": question, **answer, "sources": sources}
    except Exception as e:
        logger.warning(f"Document search failed, using canned answer: {e}")

    answer = canned_answer(question)
    qa_questions_total.labels(confidence=answer["confidence"], source="canned").inc()
    return {"question": question, **answer}


async def save_history(
    db: AsyncSession,
    user_id: uuid.UUID,
    result: Dict[str, Any],
) -> bool:
    """Store an answered question; a failure is logged and reported as False"""
    try:
        db.add(
            QAHistory(
                user_id=user_id,
                question=result["question"],
                answer=result["answer"],
                confidence=result["confidence"],
                sources=result["sources"],
            )
        )
        await db.commit()
        return True
    except Exception as e:
        await db.rollback()
        logger.error(f"Error saving Q&A history for user {user_id}: {e}")
        return False


async def list_history(
    db: AsyncSession,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[QAHistory], int]:
    """The user's questions, newest first"""
    total = (
        await db.execute(
            select(func.count()).select_from(QAHistory).where(QAHistory.user_id == user_id)
        )
    ).scalar_one()

    result = await db.execute(
        select(QAHistory)
        .where(QAHistory.user_id == user_id)
        .order_by(QAHistory.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def delete_history_item(
    db: AsyncSession,
    user_id: uuid.UUID,
    history_id: uuid.UUID,
) -> None:
    """Delete one of the user's entries; someone else's entry counts as missing"""
    result = await db.execute(
        select(QAHistory).where(QAHistory.id == history_id, QAHistory.user_id == user_id)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundException("History item")

    await db.delete(item)
    await db.flush()


async def clear_history(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(delete(QAHistory).where(QAHistory.user_id == user_id))
    logger.info(f"Cleared {result.rowcount} Q&A history entries for user {user_id}")
    return result.rowcount or 0
