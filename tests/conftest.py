"""
Shared test fixtures
In-memory database, temporary upload directory and authenticated clients
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-thirty-two-characters"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "100000"
os.environ["INGESTION_DISPATCH_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from typing import AsyncGenerator, Callable, Dict, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docvault.core.cache import DocumentContentStore, get_content_store
from docvault.core.config import settings
from docvault.core.security import create_access_token, get_password_hash
from docvault.db import models  # noqa: F401
from docvault.db.base import Base
from docvault.db.models import User
from docvault.db.session import get_db_session
from docvault.main import app

TEST_PASSWORD = "correct-horse-battery"

# Hashing is slow; every fixture user shares one hash
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Route uploads into a temporary directory"""
    target = tmp_path / "uploads"
    target.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    return target


@pytest.fixture
def content_store() -> DocumentContentStore:
    return DocumentContentStore(ttl=60, max_entries=50)


@pytest_asyncio.fixture
async def client(session_maker, upload_dir, content_store) -> AsyncGenerator[AsyncClient, None]:
    """
    Test HTTP client using ASGI transport
    Tests the FastAPI app directly without requiring a running server
    """

    async def override_get_db_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_content_store] = lambda: content_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session_maker) -> Callable:
    """Factory creating a user directly in the database"""

    async def _make_user(role: str = "viewer", is_active: bool = True, **fields) -> Tuple[User, Dict[str, str]]:
        async with session_maker() as session:
            user = User(
                email=fields.pop("email", f"{role}_{uuid.uuid4().hex[:8]}@example.com"),
                first_name=fields.pop("first_name", role.capitalize()),
                last_name=fields.pop("last_name", "Tester"),
                hashed_password=_PASSWORD_HASH,
                role=role,
                is_active=is_active,
                **fields,
            )
            session.add(user)
            await session.commit()

        token = create_access_token({"sub": str(user.id), "role": user.role})
        return user, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin")


@pytest_asyncio.fixture
async def editor(make_user):
    return await make_user("editor")


@pytest_asyncio.fixture
async def viewer(make_user):
    return await make_user("viewer")


@pytest.fixture
def sample_pdf() -> bytes:
    """Minimal PDF bytes"""
    return b"%PDF-1.4\n1 0 obj\n<<\n/Type /Catalog\n/Pages 2 0 R\n>>\nendobj\n"


@pytest.fixture
def upload_document(client: AsyncClient, sample_pdf: bytes) -> Callable:
    """Helper uploading a document as the given user"""

    async def _upload(headers: Dict[str, str], title: str = "Quarterly Report", content: bytes = None, **form):
        data = {"title": title, **form}
        files = {"file": ("report.pdf", content if content is not None else sample_pdf, "application/pdf")}
        return await client.post("/api/documents", headers=headers, data=data, files=files)

    return _upload


@pytest.fixture
def password() -> str:
    """Plain-text password shared by every fixture user"""
    return TEST_PASSWORD
