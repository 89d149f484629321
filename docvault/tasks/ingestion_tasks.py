"""
Ingestion Tasks
Background processing of queued ingestion jobs
"""

import asyncio
import uuid
from typing import Any, Dict

from sqlalchemy import select

from docvault.core.logging import get_logger
from docvault.tasks.celery_app import celery_app

logger = get_logger(__name__)


async def run_ingestion_job(session_maker, job_id: uuid.UUID) -> Dict[str, Any]:
    """
    Move a job through processing to completed or failed

    Processing reads the document's current file as text; an unreadable
    file fails the job with the error message.
    """
    from docvault.db.models import Document
    from docvault.services.ingestion import IngestionTracker
    from docvault.storage.client import read_text

    async with session_maker() as db:
        job = await IngestionTracker.update_status(db, job_id, "processing")
        await db.commit()

        result = await db.execute(select(Document).where(Document.id == job.document_id))
        document = result.scalar_one_or_none()

        try:
            if document is None or document.is_deleted:
                raise FileNotFoundError(f"Document {job.document_id} is no longer available")
            text = read_text(document.file_path, limit=5000)
        except OSError as e:
            logger.error(f"Ingestion job {job_id} failed: {e}")
            await IngestionTracker.update_status(db, job_id, "failed", str(e))
            await db.commit()
            return {"job_id": str(job_id), "status": "failed", "error": str(e)}

        await IngestionTracker.update_status(db, job_id, "completed")
        await db.commit()

    logger.info(f"Ingestion job {job_id} completed ({len(text)} characters read)")
    return {"job_id": str(job_id), "status": "completed", "characters": len(text)}


@celery_app.task(bind=True)
def process_ingestion_job(self, job_id: str) -> Dict[str, Any]:
    """Worker entry point for a queued ingestion job"""
    import docvault.db.session as session_module

    logger.info(f"Processing ingestion job: {job_id}")

    async def process():
        # Ensure database is initialized (for Celery worker process)
        if session_module.async_session_maker is None:
            logger.info("Initializing database connection for Celery worker")
            await session_module.init_db()

        return await run_ingestion_job(session_module.async_session_maker, uuid.UUID(job_id))

    return asyncio.run(process())
