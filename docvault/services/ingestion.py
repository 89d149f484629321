"""
Ingestion Job Tracker
Processing-status records for documents and optional worker dispatch
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.config import settings
from docvault.core.exceptions import NotFoundException, ValidationException
from docvault.core.logging import get_logger
from docvault.db.base import utcnow
from docvault.db.models import JOB_STATUSES, IngestionJob
from docvault.monitoring.metrics import ingestion_jobs_total

logger = get_logger(__name__)

TERMINAL_STATUSES = ("completed", "failed")


class IngestionTracker:
    """Create, list and move ingestion jobs"""

    @staticmethod
    async def create_job(db: AsyncSession, document_id: uuid.UUID) -> IngestionJob:
        """New pending job, started now"""
        job = IngestionJob(
            document_id=document_id,
            status="pending",
            started_at=utcnow(),
            completed_at=None,
        )
        db.add(job)
        await db.flush()
        ingestion_jobs_total.labels(status="pending").inc()
        logger.info(f"Created ingestion job {job.id} for document {document_id}")
        return job

    @staticmethod
    def apply_status(
        job: IngestionJob,
        status: str,
        error_message: Optional[str] = None,
    ) -> IngestionJob:
        """
        Move a job to any status

        Any transition is allowed, including from completed back to pending
        for a manual retry. Entering completed or failed stamps completed_at;
        entering failed with a message records it. Entering pending or
        processing leaves completed_at and error_message as they were.
        """
        if status not in JOB_STATUSES:
            raise ValidationException(
                "Invalid status",
                details={"allowed": list(JOB_STATUSES)},
            )

        previous = job.status
        job.status = status

        if status in TERMINAL_STATUSES:
            job.completed_at = utcnow()
        if status == "failed" and error_message:
            job.error_message = error_message

        logger.debug(f"Ingestion job {job.id}: {previous} -> {status}")
        return job

    @staticmethod
    async def update_status(
        db: AsyncSession,
        job_id: uuid.UUID,
        status: str,
        error_message: Optional[str] = None,
    ) -> IngestionJob:
        job = await IngestionTracker.get_job(db, job_id)
        IngestionTracker.apply_status(job, status, error_message)
        await db.flush()
        ingestion_jobs_total.labels(status=status).inc()
        logger.info(f"Ingestion job {job_id} status set to {status}")
        return job

    @staticmethod
    async def get_job(db: AsyncSession, job_id: uuid.UUID) -> IngestionJob:
        result = await db.execute(select(IngestionJob).where(IngestionJob.id == job_id))
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFoundException("Ingestion job")
        return job

    @staticmethod
    async def list_jobs(
        db: AsyncSession,
        status: Optional[str] = None,
        document_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[IngestionJob], int]:
        """Jobs newest first, with the total count for pagination"""
        filters = []
        if status:
            filters.append(IngestionJob.status == status)
        if document_id:
            filters.append(IngestionJob.document_id == document_id)

        total = (
            await db.execute(select(func.count()).select_from(IngestionJob).where(*filters))
        ).scalar_one()

        result = await db.execute(
            select(IngestionJob)
            .where(*filters)
            .order_by(IngestionJob.started_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def latest_job_for_document(
        db: AsyncSession,
        document_id: uuid.UUID,
    ) -> Optional[IngestionJob]:
        result = await db.execute(
            select(IngestionJob)
            .where(IngestionJob.document_id == document_id)
            .order_by(IngestionJob.started_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def dispatch(job: IngestionJob) -> bool:
        """
        Hand the job to the background worker when dispatch is enabled

        Returns:
            True if a task was enqueued
        """
        if not settings.INGESTION_DISPATCH_ENABLED:
            return False

        from docvault.tasks.ingestion_tasks import process_ingestion_job

        process_ingestion_job.delay(str(job.id))
        logger.info(f"Dispatched ingestion job {job.id}")
        return True
