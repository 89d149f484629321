"""
Q&A API Routes
Question answering over the caller's documents and answer history
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.api.dependencies import get_current_user, parse_uuid, require_document_permission
from docvault.core.cache import DocumentContentStore, get_content_store
from docvault.core.exceptions import ValidationException
from docvault.core.logging import get_logger
from docvault.db.models import Document as DocumentModel
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.models.common import Pagination, success
from docvault.models.qa import (
    AnswerResponse,
    AskRequest,
    IndexResponse,
    QAHistoryListResponse,
    QAHistoryResponse,
)
from docvault.services import qa

logger = get_logger(__name__)
router = APIRouter()


@router.post("/ask")
async def ask_question(
    request: AskRequest,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    """
    Answer a question from the caller's documents

    Always answers: when nothing relevant is found, or searching fails,
    a keyword-based fallback answer is returned instead of an error.
    """
    question = request.question.strip()
    if not question:
        raise ValidationException("Question is required")

    result = await qa.answer_question(db, store, question, current_user)
    await qa.save_history(db, current_user.id, result)

    return success("Question answered", AnswerResponse(**result))


@router.get("/history")
async def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    items, total = await qa.list_history(db, current_user.id, page=page, limit=limit)
    data = QAHistoryListResponse(
        history=[QAHistoryResponse.model_validate(i) for i in items],
        pagination=Pagination.build(page, limit, total),
    )
    return success("History retrieved", data)


@router.delete("/history")
async def clear_history(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    removed = await qa.clear_history(db, current_user.id)
    await db.commit()
    return success("History cleared", {"deleted": removed})


@router.delete("/history/{history_id}")
async def delete_history_item(
    history_id: str,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await qa.delete_history_item(db, current_user.id, parse_uuid(history_id, "history ID"))
    await db.commit()
    return success("History item deleted")


@router.post("/index/{document_id}")
async def index_document(
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    """Load a document's latest version into the Q&A content store"""
    entry = await qa.index_document(db, store, document.id)
    data = IndexResponse(
        document_id=document.id,
        title=entry["title"],
        characters=len(entry["content"]),
    )
    return success("Document indexed successfully", data)
