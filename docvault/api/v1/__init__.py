# API routes
from fastapi import APIRouter

from docvault.api.v1 import auth, documents, ingestion, qa, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(documents.router, prefix="/documents", tags=["documents"])
router.include_router(ingestion.router, prefix="/ingestion", tags=["ingestion"])
router.include_router(qa.router, prefix="/qa", tags=["qa"])
