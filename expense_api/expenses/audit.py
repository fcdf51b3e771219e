"""Audit recorder — append-only trail of expense lifecycle actions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from expense_api.common.constants import ExpenseActionType
from expense_api.common.exceptions import NotFoundException
from expense_api.database import utc_now
from expense_api.expenses import store
from expense_api.expenses.models import Expense, ExpenseAction
from expense_api.users.models import User

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Builds and persists immutable ``ExpenseAction`` rows.

    Records are written inside the caller's transaction; the recorder
    never commits. Within one expense the trail is gap-free (``sequence``
    runs 1, 2, 3, ...) and timestamps never go backwards, even if the
    clock does.
    """

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.db = db
        self.clock = clock

    async def record(
        self,
        expense: Expense,
        actor: User,
        action_type: ExpenseActionType,
        comment: Optional[str] = None,
    ) -> ExpenseAction:
        """Append one action for *expense* performed by *actor*."""
        previous = await store.latest_action(self.db, expense.id)

        # Read the clock as late as possible: the stamp reflects write order.
        timestamp = self.clock()
        if previous is not None and timestamp < previous.timestamp:
            timestamp = previous.timestamp

        action = ExpenseAction(
            expense_id=expense.id,
            actor_id=actor.id,
            action_type=action_type,
            comment=comment,
            sequence=previous.sequence + 1 if previous is not None else 1,
            timestamp=timestamp,
        )
        await store.save_action(self.db, action)
        logger.debug(
            "audit %s expense=%s actor=%s seq=%s",
            action_type.value, expense.id, actor.id, action.sequence,
        )
        return action

    async def history(self, expense_id: int) -> list[ExpenseAction]:
        """All actions for an expense, oldest first.

        A missing expense is an error, not an empty trail.
        """
        if not await store.expense_exists(self.db, expense_id):
            raise NotFoundException("Expense", expense_id)
        return await store.query_actions_by_expense(self.db, expense_id)
