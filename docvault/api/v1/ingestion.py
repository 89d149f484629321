"""
Ingestion API Routes
Job listing and manual status changes, plus per-document job lookup
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.api.dependencies import parse_uuid, require_document_permission, require_role
from docvault.core.exceptions import NotFoundException
from docvault.core.logging import get_logger
from docvault.db.models import Document as DocumentModel
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.models.common import Pagination, success
from docvault.models.ingestion import STATUS_PATTERN, JobListResponse, JobResponse, JobUpdate
from docvault.services.ingestion import IngestionTracker

logger = get_logger(__name__)
router = APIRouter()

require_admin = require_role("admin")


@router.get("")
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status", pattern=STATUS_PATTERN),
    document_id: Optional[str] = None,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    jobs, total = await IngestionTracker.list_jobs(
        db,
        status=status_filter,
        document_id=parse_uuid(document_id, "document ID") if document_id else None,
        page=page,
        limit=limit,
    )
    data = JobListResponse(
        jobs=[JobResponse.model_validate(j) for j in jobs],
        pagination=Pagination.build(page, limit, total),
    )
    return success("Ingestion jobs retrieved", data)


@router.get("/document/{document_id}")
async def get_document_job(
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
):
    """Latest ingestion job of a document"""
    job = await IngestionTracker.latest_job_for_document(db, document.id)
    if job is None:
        raise NotFoundException("Ingestion job")
    return success("Ingestion job retrieved", JobResponse.model_validate(job))


@router.post("/document/{document_id}", status_code=status.HTTP_201_CREATED)
async def start_document_job(
    document: DocumentModel = Depends(require_document_permission("write")),
    db: AsyncSession = Depends(get_db_session),
):
    """Queue a fresh pending job for a document"""
    job = await IngestionTracker.create_job(db, document.id)
    await db.commit()
    IngestionTracker.dispatch(job)
    return success("Ingestion job started", JobResponse.model_validate(job))


@router.get("/{job_id}")
async def get_job(
    job_id: str,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    job = await IngestionTracker.get_job(db, parse_uuid(job_id, "job ID"))
    return success("Ingestion job retrieved", JobResponse.model_validate(job))


@router.put("/{job_id}")
async def update_job(
    job_id: str,
    request: JobUpdate,
    current_user: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    job = await IngestionTracker.update_status(
        db,
        parse_uuid(job_id, "job ID"),
        request.status,
        request.error_message,
    )
    await db.commit()

    logger.info(f"Ingestion job {job.id} set to {job.status} by {current_user.email}")
    return success("Ingestion job updated", JobResponse.model_validate(job))
