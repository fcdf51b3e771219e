"""Expenses service layer — the expense lifecycle engine.

Every public operation runs as one transaction: the status change and its
audit record are committed together or not at all.

    SUBMITTED --(MANAGER: approve)--> APPROVED --(FINANCE: reimburse)--> REIMBURSED
    SUBMITTED --(MANAGER: reject)---> REJECTED
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from expense_api.common.constants import (
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    TRANSITIONS,
    ExpenseActionType,
    ExpenseCategory,
    ExpenseStatus,
)
from expense_api.common.exceptions import (
    ForbiddenException,
    InvalidStateException,
    ValidationException,
)
from expense_api.config import settings
from expense_api.database import atomic, utc_now
from expense_api.expenses import store
from expense_api.expenses.audit import AuditRecorder
from expense_api.expenses.models import Expense, ExpenseAction

logger = logging.getLogger(__name__)

# Numeric(12, 2): whole cents, at most 10 integer digits.
AMOUNT_QUANTUM = Decimal("0.01")
MAX_AMOUNT = Decimal(10) ** 10


def _normalize_currency(currency: Optional[str]) -> str:
    code = (currency or "").strip().upper()
    return code or settings.DEFAULT_CURRENCY


class ExpenseService:
    """Business logic for the expense lifecycle.

    ``clock`` supplies every timestamp the service writes, so tests can
    pin time.
    """

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.db = db
        self.clock = clock
        self.audit = AuditRecorder(db, clock)

    # ── Submit ────────────────────────────────────────────────────────

    async def submit(
        self,
        owner_id: int,
        amount: Union[Decimal, float, str],
        currency: Optional[str],
        category: Union[ExpenseCategory, str],
        description: str,
        expense_date: Optional[date],
    ) -> Expense:
        """Create a SUBMITTED expense and its SUBMIT action."""
        amount, currency, category = self._validate_submission(
            amount, currency, category, description, expense_date,
        )

        async with atomic(self.db):
            owner = await store.load_user(self.db, owner_id)
            now = self.clock()
            expense = Expense(
                user_id=owner.id,
                owner=owner,
                amount=amount,
                currency=currency,
                category=category,
                description=description,
                expense_date=expense_date,
                status=ExpenseStatus.SUBMITTED,
                created_at=now,
                updated_at=now,
            )
            await store.save_expense(self.db, expense)
            await self.audit.record(expense, owner, ExpenseActionType.SUBMIT)

        logger.info(
            "expense %s submitted by user %s (%s %s)",
            expense.id, owner.id, expense.amount, expense.currency,
        )
        return expense

    @staticmethod
    def _validate_submission(
        amount,
        currency: Optional[str],
        category,
        description: str,
        expense_date: Optional[date],
    ) -> tuple[Decimal, str, ExpenseCategory]:
        errors: dict[str, list[str]] = {}

        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            value = None
        if value is None or not value.is_finite() or value <= 0:
            errors["amount"] = ["Amount must be a number greater than zero."]
        elif value >= MAX_AMOUNT or value != value.quantize(AMOUNT_QUANTUM):
            errors["amount"] = [
                "Amount must have at most 2 decimal places and 10 integer digits."
            ]

        code = _normalize_currency(currency)
        if len(code) != 3 or not code.isalpha():
            errors["currency"] = ["Currency must be a 3-letter code."]

        try:
            category = ExpenseCategory(category)
        except ValueError:
            errors["category"] = [f"Unknown category '{category}'."]

        if not description or not description.strip():
            errors["description"] = ["Description must not be blank."]
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            errors["description"] = [
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters."
            ]

        if expense_date is None:
            errors["expense_date"] = ["Expense date is required."]

        if errors:
            raise ValidationException(errors)
        return value.quantize(AMOUNT_QUANTUM), code, category

    # ── Read ──────────────────────────────────────────────────────────

    async def get_expense(self, expense_id: int) -> Expense:
        """Get a single expense by ID."""
        return await store.load_expense(self.db, expense_id)

    async def list_by_user(self, user_id: int) -> list[Expense]:
        """All expenses owned by a user (empty for unknown users)."""
        return await store.query_expenses_by_user(self.db, user_id)

    async def list_by_status(self, status: Union[ExpenseStatus, str]) -> list[Expense]:
        """All expenses currently in *status*."""
        return await store.query_expenses_by_status(self.db, ExpenseStatus(status))

    async def history(self, expense_id: int) -> list[ExpenseAction]:
        """The audit trail of an expense, oldest first."""
        return await self.audit.history(expense_id)

    # ── Transitions ───────────────────────────────────────────────────

    async def approve(self, actor_id: int, expense_id: int) -> Expense:
        """Manager approval: SUBMITTED → APPROVED."""
        return await self._transition(ExpenseActionType.APPROVE, actor_id, expense_id)

    async def reject(
        self,
        actor_id: int,
        expense_id: int,
        reason: Optional[str] = None,
    ) -> Expense:
        """Manager rejection: SUBMITTED → REJECTED; *reason* becomes the comment."""
        return await self._transition(
            ExpenseActionType.REJECT, actor_id, expense_id, comment=reason,
        )

    async def reimburse(
        self,
        actor_id: int,
        expense_id: int,
        comment: Optional[str] = None,
    ) -> Expense:
        """Finance payout: APPROVED → REIMBURSED."""
        return await self._transition(
            ExpenseActionType.REIMBURSE, actor_id, expense_id, comment=comment,
        )

    async def _transition(
        self,
        action_type: ExpenseActionType,
        actor_id: int,
        expense_id: int,
        comment: Optional[str] = None,
    ) -> Expense:
        rule = TRANSITIONS[action_type]
        if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
            raise ValidationException(
                {"comment": [f"Comment must be at most {MAX_COMMENT_LENGTH} characters."]}
            )

        try:
            async with atomic(self.db):
                actor = await store.load_user(self.db, actor_id)
                if actor.role != rule.role:
                    logger.warning(
                        "user %s (%s) may not %s expense %s",
                        actor.id, actor.role.value, rule.verb, expense_id,
                    )
                    raise ForbiddenException(
                        f"Only a {rule.role.value} can {rule.verb} expenses."
                    )

                expense = await store.load_expense(self.db, expense_id, for_update=True)
                if expense.status != rule.source:
                    logger.warning(
                        "cannot %s expense %s in status %s",
                        rule.verb, expense.id, expense.status.value,
                    )
                    raise InvalidStateException(
                        expense.id, expense.status, rule.source, rule.verb,
                    )

                previous = expense.status
                expense.status = rule.target
                expense.updated_at = self.clock()
                await store.save_expense(self.db, expense)
                await self.audit.record(expense, actor, action_type, comment)
        except StaleDataError:
            # Another transaction moved the expense after we read it.
            status = await store.current_status(self.db, expense_id)
            logger.warning(
                "lost race to %s expense %s; status is now %s",
                rule.verb, expense_id, getattr(status, "value", status),
            )
            raise InvalidStateException(expense_id, status, rule.source, rule.verb) from None

        logger.info(
            "expense %s %s -> %s by user %s",
            expense.id, previous.value, expense.status.value, actor.id,
        )
        return expense
