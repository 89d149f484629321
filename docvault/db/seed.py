#!/usr/bin/env python3
"""
Seed Admin User
Creates or resets the bootstrap admin account
"""

import asyncio
import os
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docvault.core.logging import get_logger, setup_logging
from docvault.core.security import get_password_hash
from docvault.db.models import User

logger = get_logger(__name__)


async def seed_admin_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> Tuple[User, bool]:
    """
    Ensure an active admin with the given credentials exists

    Returns:
        The admin user and whether it was newly created
    """
    email = email.lower()
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user:
        user.hashed_password = get_password_hash(password)
        user.role = "admin"
        user.is_active = True
        await session.commit()
        logger.info(f"Admin user already exists, password reset: {email}")
        return user, False

    user = User(
        email=email,
        first_name="Admin",
        last_name="User",
        hashed_password=get_password_hash(password),
        role="admin",
        is_active=True,
    )
    session.add(user)
    await session.commit()
    logger.info(f"Created admin user: {email}")
    return user, True


async def main() -> None:
    from docvault.db import session as session_module

    await session_module.init_db()
    try:
        async with session_module.async_session_maker() as session:
            await seed_admin_user(
                session,
                os.environ.get("ADMIN_EMAIL", "admin@example.com"),
                os.environ.get("ADMIN_PASSWORD", "admin12345"),
            )
    finally:
        await session_module.close_db()


def run() -> None:
    """Console entry point"""
    setup_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
