"""
Unit Tests for the Version Manager
Tests for docvault/services/versions.py
"""

import uuid

import pytest
import pytest_asyncio

from docvault.core.exceptions import NotFoundException
from docvault.db.models import Document, User
from docvault.services.versions import VersionManager
from docvault.storage.client import StoredFile


def stored(name: str, content_type: str = "application/pdf", size: int = 10) -> StoredFile:
    return StoredFile(path=f"/uploads/{name}", original_name=name, content_type=content_type, size=size)


@pytest_asyncio.fixture
async def document(db_session):
    owner = User(
        email=f"owner_{uuid.uuid4().hex[:8]}@example.com",
        hashed_password="x",
        first_name="Owner",
        last_name="One",
        role="editor",
    )
    db_session.add(owner)
    await db_session.flush()

    doc = Document(
        title="Contract",
        file_path="/uploads/initial.pdf",
        file_type="application/pdf",
        file_size=1,
        created_by=owner.id,
    )
    db_session.add(doc)
    await db_session.commit()
    return doc


@pytest.mark.unit
class TestVersionManager:

    @pytest.mark.asyncio
    async def test_first_version_is_one(self, db_session, document):
        version = await VersionManager.create_version(
            db_session, document, stored("a.pdf"), author_id=document.created_by
        )
        assert version.version_number == 1

    @pytest.mark.asyncio
    async def test_numbers_are_contiguous(self, db_session, document):
        for i in range(3):
            await VersionManager.create_version(
                db_session, document, stored(f"{i}.pdf"), author_id=document.created_by
            )
        await db_session.commit()

        versions = await VersionManager.list_versions(db_session, document.id)
        assert [v.version_number for v in versions] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_document_pointer_follows_latest(self, db_session, document):
        await VersionManager.create_version(
            db_session, document, stored("v1.pdf"), author_id=document.created_by
        )
        await VersionManager.create_version(
            db_session,
            document,
            stored("v2.png", content_type="image/png", size=99),
            author_id=document.created_by,
            change_summary="Scanned copy",
        )
        await db_session.commit()

        latest = await VersionManager.latest_version(db_session, document.id)
        assert latest.version_number == 2
        assert latest.change_summary == "Scanned copy"
        assert document.file_path == latest.file_path == "/uploads/v2.png"
        assert document.file_type == "image/png"
        assert document.file_size == 99

    @pytest.mark.asyncio
    async def test_get_version(self, db_session, document):
        await VersionManager.create_version(
            db_session, document, stored("v1.pdf"), author_id=document.created_by
        )
        await db_session.commit()

        version = await VersionManager.get_version(db_session, document.id, 1)
        assert version.file_path == "/uploads/v1.pdf"

        with pytest.raises(NotFoundException):
            await VersionManager.get_version(db_session, document.id, 2)

    @pytest.mark.asyncio
    async def test_latest_version_none_without_versions(self, db_session, document):
        assert await VersionManager.latest_version(db_session, document.id) is None
        assert await VersionManager.list_versions(db_session, document.id) == []
