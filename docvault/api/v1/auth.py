"""
Authentication API Routes
Registration, login and the caller's own profile
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.api.dependencies import get_current_user
from docvault.core.exceptions import AuthenticationException, ValidationException
from docvault.core.logging import get_logger
from docvault.core.security import create_access_token, get_password_hash, verify_password
from docvault.db.models import User as UserModel
from docvault.db.session import get_db_session
from docvault.models.auth import (
    AuthData,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)
from docvault.models.common import success

logger = get_logger(__name__)
router = APIRouter()


def issue_token(user: UserModel) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
):
    """
    Register a new user account

    - **email**: User email address (must be unique)
    - **password**: User password (min 8 characters)
    - **first_name** / **last_name**: User's name
    """
    email = request.email.lower()

    result = await db.execute(select(UserModel).where(UserModel.email == email))
    if result.scalar_one_or_none():
        raise ValidationException(
            message="User already exists",
            details={"email": email},
        )

    user = UserModel(
        email=email,
        hashed_password=get_password_hash(request.password),
        first_name=request.first_name,
        last_name=request.last_name,
        role="viewer",
        is_active=True,
    )
    db.add(user)
    await db.commit()

    logger.info(f"New user registered: {user.email}")

    data = AuthData(user=UserResponse.model_validate(user), token=issue_token(user))
    return success("User registered successfully", data)


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
):
    """Authenticate user and return a JWT access token"""
    email = request.email.lower()

    result = await db.execute(select(UserModel).where(UserModel.email == email))
    user = result.scalar_one_or_none()

    if not user:
        logger.warning(f"Failed login attempt for email: {email}")
        raise AuthenticationException(message="Invalid credentials")

    if not user.is_active:
        raise AuthenticationException(message="Your account has been deactivated")

    if not verify_password(request.password, user.hashed_password):
        logger.warning(f"Failed login attempt for email: {email}")
        raise AuthenticationException(message="Invalid credentials")

    logger.info(f"User logged in: {user.email}")

    data = AuthData(user=UserResponse.model_validate(user), token=issue_token(user))
    return success("Login successful", data)


@router.get("/me")
async def get_me(current_user: UserModel = Depends(get_current_user)):
    """Get current user information"""
    return success("User profile retrieved", UserResponse.model_validate(current_user))


@router.put("/me")
async def update_me(
    request: ProfileUpdate,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Update the caller's name and/or password"""
    if request.first_name is not None:
        current_user.first_name = request.first_name
    if request.last_name is not None:
        current_user.last_name = request.last_name
    if request.password is not None:
        current_user.hashed_password = get_password_hash(request.password)

    await db.commit()

    logger.info(f"User profile updated: {current_user.email}")
    return success("Profile updated successfully", UserResponse.model_validate(current_user))
