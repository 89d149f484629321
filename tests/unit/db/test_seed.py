"""
Unit Tests for Admin Seeding
Tests for docvault/db/seed.py
"""

import pytest

from docvault.core.security import verify_password
from docvault.db.models import User
from docvault.db.seed import seed_admin_user


@pytest.mark.unit
class TestSeedAdminUser:

    @pytest.mark.asyncio
    async def test_creates_admin(self, db_session):
        user, created = await seed_admin_user(db_session, "Root@Example.com", "first-password")

        assert created is True
        assert user.email == "root@example.com"
        assert user.role == "admin"
        assert user.is_active is True
        assert verify_password("first-password", user.hashed_password)

    @pytest.mark.asyncio
    async def test_existing_user_is_promoted_and_reset(self, db_session):
        db_session.add(
            User(
                email="root@example.com",
                first_name="Old",
                last_name="Account",
                hashed_password="stale",
                role="viewer",
                is_active=False,
            )
        )
        await db_session.commit()

        user, created = await seed_admin_user(db_session, "root@example.com", "second-password")

        assert created is False
        assert user.first_name == "Old"
        assert user.role == "admin"
        assert user.is_active is True
        assert verify_password("second-password", user.hashed_password)
