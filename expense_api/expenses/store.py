"""Expense and audit store — the narrow read/write contract the lifecycle engine uses.

Every query here eager-loads what callers will touch (``Expense.owner``);
nothing downstream relies on implicit lazy loading.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from expense_api.common.constants import ExpenseStatus
from expense_api.common.exceptions import NotFoundException
from expense_api.expenses.models import Expense, ExpenseAction
from expense_api.users.models import User
from expense_api.users.service import UserService


# ── Users ───────────────────────────────────────────────────────────

async def load_user(db: AsyncSession, user_id: int) -> User:
    return await UserService.get_user(db, user_id)


# ── Expenses ────────────────────────────────────────────────────────

async def load_expense(
    db: AsyncSession,
    expense_id: int,
    *,
    for_update: bool = False,
) -> Expense:
    """Load one expense with its owner.

    With ``for_update`` the row is locked (``SELECT ... FOR UPDATE``) until
    the surrounding transaction ends, and any copy already in the session
    is refreshed from the database.
    """
    stmt = (
        select(Expense)
        .options(joinedload(Expense.owner, innerjoin=True))
        .where(Expense.id == expense_id)
    )
    if for_update:
        stmt = stmt.with_for_update(of=Expense).execution_options(populate_existing=True)
    expense = (await db.execute(stmt)).scalars().first()
    if expense is None:
        raise NotFoundException("Expense", expense_id)
    return expense


async def current_status(db: AsyncSession, expense_id: int) -> Optional[ExpenseStatus]:
    """Committed status of an expense, bypassing the session identity map."""
    stmt = select(Expense.status).where(Expense.id == expense_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def expense_exists(db: AsyncSession, expense_id: int) -> bool:
    stmt = select(Expense.id).where(Expense.id == expense_id)
    return (await db.execute(stmt)).scalar_one_or_none() is not None


async def save_expense(db: AsyncSession, expense: Expense) -> Expense:
    """Insert or update an expense; the version check runs on flush."""
    db.add(expense)
    await db.flush()
    return expense


async def query_expenses_by_user(db: AsyncSession, user_id: int) -> list[Expense]:
    stmt = (
        select(Expense)
        .options(joinedload(Expense.owner, innerjoin=True))
        .where(Expense.user_id == user_id)
        .order_by(Expense.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def query_expenses_by_status(
    db: AsyncSession,
    status: ExpenseStatus,
) -> list[Expense]:
    stmt = (
        select(Expense)
        .options(joinedload(Expense.owner, innerjoin=True))
        .where(Expense.status == status)
        .order_by(Expense.id)
    )
    return list((await db.execute(stmt)).scalars().all())


# ── Audit actions ───────────────────────────────────────────────────

async def save_action(db: AsyncSession, action: ExpenseAction) -> ExpenseAction:
    """Append an action; the (expense_id, sequence) unique key rejects duplicates."""
    db.add(action)
    await db.flush()
    return action


async def latest_action(db: AsyncSession, expense_id: int) -> Optional[ExpenseAction]:
    stmt = (
        select(ExpenseAction)
        .where(ExpenseAction.expense_id == expense_id)
        .order_by(ExpenseAction.sequence.desc())
        .limit(1)
    )
    return (await db.execute(stmt)).scalars().first()


async def query_actions_by_expense(
    db: AsyncSession,
    expense_id: int,
) -> list[ExpenseAction]:
    """All actions of an expense, oldest first; ties keep insertion order."""
    stmt = (
        select(ExpenseAction)
        .where(ExpenseAction.expense_id == expense_id)
        .order_by(ExpenseAction.timestamp.asc(), ExpenseAction.sequence.asc())
    )
    return list((await db.execute(stmt)).scalars().all())
