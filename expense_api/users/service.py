"""Users service layer — identity and role lookup, demo data seeding."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from expense_api.common.constants import UserRole
from expense_api.common.exceptions import NotFoundException
from expense_api.users.models import User

logger = logging.getLogger(__name__)

DEMO_USERS: list[tuple[str, str, UserRole]] = [
    ("Employee 1", "emp@demo.com", UserRole.EMPLOYEE),
    ("Manager 1", "mgr@demo.com", UserRole.MANAGER),
    ("Finance 1", "fin@demo.com", UserRole.FINANCE),
]


class UserService:
    """Read-mostly access to users; roles are fixed at creation."""

    @staticmethod
    async def get_user(db: AsyncSession, user_id: int) -> User:
        """Get a single user by ID."""
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundException("User", user_id)
        return user

    @staticmethod
    async def create_user(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        role: UserRole,
        password_hash: str = "not-real",
    ) -> User:
        """Insert a user and flush so the id is assigned."""
        user = User(name=name, email=email, role=role, password_hash=password_hash)
        db.add(user)
        await db.flush()
        return user

    @staticmethod
    async def seed_demo_users(db: AsyncSession) -> list[User]:
        """Insert one user per role when the users table is empty.

        Returns the created users; an already-populated table is left
        untouched and an empty list comes back.
        """
        total = (await db.execute(select(func.count()).select_from(User))).scalar() or 0
        if total:
            return []

        created = [
            await UserService.create_user(db, name=name, email=email, role=role)
            for name, email, role in DEMO_USERS
        ]
        await db.commit()
        logger.info("seeded %d demo users", len(created))
        return created
