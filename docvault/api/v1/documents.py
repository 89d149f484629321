"""
Documents API Routes
Document upload, listing, metadata, versions, downloads and access grants
"""

import json
import mimetypes
import unicodedata
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.api.dependencies import (
    get_current_user,
    parse_uuid,
    require_document_permission,
    require_role,
)
from docvault.core.cache import DocumentContentStore, get_content_store
from docvault.core.exceptions import ValidationException
from docvault.core.logging import get_logger
from docvault.core.permissions import PermissionChecker
from docvault.db.models import MAX_TAG_LENGTH
from docvault.db.models import Document as DocumentModel
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.models.common import Pagination, success
from docvault.models.document import (
    DocumentCreated,
    DocumentDetail,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    VersionResponse,
)
from docvault.models.permission import PermissionGrant, PermissionResponse
from docvault.services.documents import DocumentService
from docvault.services.ingestion import IngestionTracker
from docvault.services.versions import VersionManager
from docvault.storage.client import ensure_exists, iter_file, save_upload

logger = get_logger(__name__)
router = APIRouter()


def parse_tags(raw: Optional[str]) -> List[str]:
    """Accept a JSON list of strings or a comma separated list"""
    if not raw or not raw.strip():
        return []

    raw = raw.strip()
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationException("Tags must be a JSON list or a comma separated list")
        if not isinstance(parsed, list) or not all(isinstance(t, str) for t in parsed):
            raise ValidationException("Tags must be a list of strings")
        tags = parsed
    else:
        tags = raw.split(",")

    too_long = [t.strip() for t in tags if len(t.strip()) > MAX_TAG_LENGTH]
    if too_long:
        raise ValidationException(
            f"Tags must be at most {MAX_TAG_LENGTH} characters",
            details={"tags": too_long},
        )
    return tags


def clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationException("Title is required")
    if len(title) > 255:
        raise ValidationException("Title must be at most 255 characters")
    return title


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name"""
    cleaned = filename.replace('"', "").replace("\n", " ").replace("\r", " ")
    fallback = unicodedata.normalize("NFKD", cleaned).encode("ascii", "ignore").decode("ascii").strip()
    if not fallback or fallback.startswith("."):
        fallback = f"download{Path(cleaned).suffix}"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(cleaned, safe='')}"


def file_response(path: str, media_type: str, filename: str) -> StreamingResponse:
    """Stream a stored file as an attachment"""
    ensure_exists(path)
    return StreamingResponse(
        iter_file(path),
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )


def download_name(title: str, path: str) -> str:
    return f"{title}{Path(path).suffix}"


@router.get("")
async def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=255),
    tags: Optional[str] = Query(None, description="Comma separated tags"),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    List documents visible to the caller

    Admins see every document; other users see documents they created or
    have been granted access to.
    """
    tag_filter = [t.strip() for t in tags.split(",") if t.strip()] if tags else None

    documents, total = await DocumentService.list_documents(
        db,
        current_user,
        page=page,
        limit=limit,
        search=search.strip() if search else None,
        tags=tag_filter,
    )

    data = DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in documents],
        pagination=Pagination.build(page, limit, total),
    )
    return success("Documents retrieved", data)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_document(
    file: UploadFile = File(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Upload a new document

    - **file**: PDF, Word document or image (max 10MB by default)
    - **title**: Document title
    - **tags**: JSON list or comma separated list
    """
    title = clean_title(title)
    tag_list = parse_tags(tags)

    stored = await save_upload(file)
    document, version, job = await DocumentService.create_document(
        db,
        current_user,
        stored,
        title=title,
        description=description.strip() if description else None,
        tags=tag_list,
    )
    IngestionTracker.dispatch(job)

    logger.info(f"Document uploaded: {document.id} - {stored.original_name} by {current_user.email}")

    data = DocumentCreated(
        document=DocumentResponse.from_document(document),
        version=VersionResponse.model_validate(version),
    )
    return success("Document uploaded successfully", data)


@router.get("/{document_id}")
async def get_document(
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
):
    latest = await VersionManager.latest_version(db, document.id)
    data = DocumentDetail(
        document=DocumentResponse.from_document(document),
        latest_version=VersionResponse.model_validate(latest) if latest else None,
    )
    return success("Document retrieved", data)


@router.put("/{document_id}")
async def update_document(
    request: DocumentUpdate,
    document: DocumentModel = Depends(require_document_permission("write")),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    await DocumentService.update_document(
        db,
        document,
        title=request.title,
        description=request.description,
        tags=request.tags,
    )
    await db.commit()
    await store.invalidate(str(document.id))

    return success("Document updated successfully", DocumentResponse.from_document(document))


@router.delete("/{document_id}")
async def delete_document(
    document: DocumentModel = Depends(require_document_permission("write")),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    """Soft delete: the document disappears from every endpoint but stays on disk"""
    await DocumentService.soft_delete(db, document)
    await db.commit()
    await store.invalidate(str(document.id))

    return success("Document deleted successfully")


@router.delete("/{document_id}/permanent")
async def permanently_delete_document(
    document_id: str,
    current_user: UserModel = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    """Remove a document, its versions, grants, jobs and files (admin only)"""
    document = await DocumentService.get_document(
        db, parse_uuid(document_id, "document ID"), include_deleted=True
    )
    removed = await DocumentService.permanent_delete(db, document)
    await store.invalidate(str(document.id))

    logger.info(f"Document {document_id} permanently deleted by {current_user.email}")
    return success("Document permanently deleted", {"files_removed": removed})


@router.get("/{document_id}/download")
async def download_document(
    document: DocumentModel = Depends(require_document_permission("read")),
):
    return file_response(
        document.file_path,
        document.file_type,
        download_name(document.title, document.file_path),
    )


# ============================================
# Versions
# ============================================
@router.post("/{document_id}/versions", status_code=status.HTTP_201_CREATED)
async def upload_version(
    file: UploadFile = File(...),
    change_summary: Optional[str] = Form(None),
    document: DocumentModel = Depends(require_document_permission("write")),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    store: DocumentContentStore = Depends(get_content_store),
):
    """Upload a new file for the document; it becomes the current file"""
    stored = await save_upload(file)
    version, job = await DocumentService.upload_version(
        db,
        document,
        current_user,
        stored,
        change_summary=change_summary.strip() if change_summary else None,
    )
    await store.invalidate(str(document.id))
    IngestionTracker.dispatch(job)

    return success("Version uploaded successfully", VersionResponse.model_validate(version))


@router.get("/{document_id}/versions")
async def list_versions(
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
):
    versions = await VersionManager.list_versions(db, document.id)
    return success(
        "Versions retrieved",
        [VersionResponse.model_validate(v) for v in versions],
    )


@router.get("/{document_id}/versions/{version_number}")
async def get_version(
    version_number: int,
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
):
    version = await VersionManager.get_version(db, document.id, version_number)
    return success("Version retrieved", VersionResponse.model_validate(version))


@router.get("/{document_id}/versions/{version_number}/download")
async def download_version(
    version_number: int,
    document: DocumentModel = Depends(require_document_permission("read")),
    db: AsyncSession = Depends(get_db_session),
):
    version = await VersionManager.get_version(db, document.id, version_number)
    media_type = mimetypes.guess_type(version.file_path)[0] or "application/octet-stream"
    return file_response(
        version.file_path,
        media_type,
        f"{document.title}-v{version.version_number}{Path(version.file_path).suffix}",
    )


# ============================================
# Permissions
# ============================================
@router.get("/{document_id}/permissions")
async def list_permissions(
    document: DocumentModel = Depends(require_document_permission("admin")),
    db: AsyncSession = Depends(get_db_session),
):
    rows = await PermissionChecker.list_permissions(db, document.id)
    return success(
        "Permissions retrieved",
        [PermissionResponse(**row) for row in rows],
    )


@router.post("/{document_id}/permissions", status_code=status.HTTP_201_CREATED)
async def set_permission(
    request: PermissionGrant,
    response: Response,
    document: DocumentModel = Depends(require_document_permission("admin")),
    db: AsyncSession = Depends(get_db_session),
):
    """Grant a user access, or change the level of an existing grant"""
    permission, created = await PermissionChecker.set_permission(
        db,
        document.id,
        request.user_id,
        request.permission_type,
    )
    await db.commit()

    rows = await PermissionChecker.list_permissions(db, document.id)
    row = next(r for r in rows if r["id"] == permission.id)

    if not created:
        response.status_code = status.HTTP_200_OK
    return success(
        "Permission added successfully" if created else "Permission updated successfully",
        PermissionResponse(**row),
    )


@router.delete("/{document_id}/permissions/{permission_id}")
async def remove_permission(
    permission_id: str,
    document: DocumentModel = Depends(require_document_permission("admin")),
    db: AsyncSession = Depends(get_db_session),
):
    await PermissionChecker.remove_permission(
        db,
        document.id,
        parse_uuid(permission_id, "permission ID"),
    )
    await db.commit()
    return success("Permission removed successfully")
