"""
User Management API Routes
Admin-only CRUD over user accounts
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.api.dependencies import parse_uuid, require_role
from docvault.core.exceptions import ConflictException, NotFoundException, ValidationException
from docvault.core.logging import get_logger
from docvault.core.permissions import PermissionChecker
from docvault.core.security import get_password_hash
from docvault.db.models import Document, QAHistory
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.models.auth import UserResponse
from docvault.models.common import Pagination, success
from docvault.models.user import UserCreate, UserListResponse, UserUpdate

logger = get_logger(__name__)
router = APIRouter()

require_admin = require_role("admin")


async def load_user(db: AsyncSession, user_id: str) -> UserModel:
    result = await db.execute(
        select(UserModel).where(UserModel.id == parse_uuid(user_id, "user ID"))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundException("User")
    return user


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[str] = Query(None, pattern="^(admin|editor|viewer)$"),
    is_active: Optional[bool] = None,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """List users with optional role and active filters"""
    filters = []
    if role:
        filters.append(UserModel.role == role)
    if is_active is not None:
        filters.append(UserModel.is_active.is_(is_active))

    total = (
        await db.execute(select(func.count()).select_from(UserModel).where(*filters))
    ).scalar_one()

    result = await db.execute(
        select(UserModel)
        .where(*filters)
        .order_by(UserModel.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    users = result.scalars().all()

    data = UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )
    return success("Users retrieved", data)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    email = request.email.lower()

    result = await db.execute(select(UserModel.id).where(UserModel.email == email))
    if result.scalar_one_or_none():
        raise ValidationException("User already exists", details={"email": email})

    user = UserModel(
        email=email,
        hashed_password=get_password_hash(request.password),
        first_name=request.first_name,
        last_name=request.last_name,
        role=request.role,
        is_active=request.is_active,
    )
    db.add(user)
    await db.commit()

    logger.info(f"User created by admin: {user.email} ({user.role})")
    return success("User created successfully", UserResponse.model_validate(user))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    user = await load_user(db, user_id)
    return success("User retrieved", UserResponse.model_validate(user))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: UserUpdate,
    _: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    user = await load_user(db, user_id)

    if request.first_name is not None:
        user.first_name = request.first_name
    if request.last_name is not None:
        user.last_name = request.last_name
    if request.role is not None:
        user.role = request.role
    if request.is_active is not None:
        user.is_active = request.is_active
    if request.password is not None:
        user.hashed_password = get_password_hash(request.password)

    await db.commit()

    logger.info(f"User updated: {user.email}")
    return success("User updated successfully", UserResponse.model_validate(user))


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: UserModel = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Delete a user together with their grants and Q&A history

    Users who still own documents cannot be deleted.
    """
    user = await load_user(db, user_id)

    if user.id == current_user.id:
        raise ValidationException("You cannot delete your own account")

    owned = (
        await db.execute(
            select(func.count()).select_from(Document).where(Document.created_by == user.id)
        )
    ).scalar_one()
    if owned:
        raise ConflictException(
            "User still owns documents; delete them first",
            details={"documents": owned},
        )

    grants = await PermissionChecker.remove_user_grants(db, user.id)
    await db.execute(delete(QAHistory).where(QAHistory.user_id == user.id))
    await db.delete(user)
    await db.commit()

    logger.info(f"User deleted: {user.email} ({grants} grants removed)")
    return success("User deleted successfully")
