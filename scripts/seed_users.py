#!/usr/bin/env python3
"""Seed demo users — one EMPLOYEE, one MANAGER and one FINANCE account.

Only touches an empty users table, so it is safe to run on every deploy.

Usage:
    python scripts/seed_users.py                 # seed using DATABASE_URL
    python scripts/seed_users.py --database-url postgresql+asyncpg://...

Requires .env at project root (or DATABASE_URL in the environment).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("seed_users")


async def seed(database_url: str) -> int:
    """Seed the demo users and return how many were created."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from expense_api.database import Base
    from expense_api.users.service import UserService
    import expense_api.expenses.models  # noqa: F401

    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            created = await UserService.seed_demo_users(session)
    finally:
        await engine.dispose()

    for user in created:
        logger.info("  %-8s id=%s %s", user.role.value, user.id, user.email)
    return len(created)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo users for the expense API")
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="Async SQLAlchemy URL (defaults to $DATABASE_URL)",
    )
    args = parser.parse_args()

    if not args.database_url:
        logger.error("No database URL: pass --database-url or set DATABASE_URL")
        return 1

    count = asyncio.run(seed(args.database_url))
    if count:
        logger.info("Seeded %d demo users", count)
    else:
        logger.info("Users table already populated; nothing to do")
    return 0


if __name__ == "__main__":
    sys.exit(main())
