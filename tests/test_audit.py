"""Tests for the audit recorder — ordering, gap-free sequences, history lookup."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from expense_api.common.constants import ExpenseActionType, ExpenseCategory
from expense_api.common.exceptions import NotFoundException
from expense_api.expenses import store
from expense_api.expenses.audit import AuditRecorder
from expense_api.expenses.models import ExpenseAction
from expense_api.expenses.service import ExpenseService
from tests.conftest import FakeClock


async def _submit(service: ExpenseService, owner_id: int):
    return await service.submit(
        owner_id=owner_id,
        amount=Decimal("40.00"),
        currency="EUR",
        category=ExpenseCategory.TRAVEL,
        description="train ticket",
        expense_date=date(2024, 3, 5),
    )


class TestRecord:
    """AuditRecorder.record behaviour."""

    async def test_sequence_is_gap_free(self, db, employee, manager, finance):
        service = ExpenseService(db)
        expense = await _submit(service, employee["id"])
        await service.approve(manager["id"], expense.id)
        await service.reimburse(finance["id"], expense.id)

        history = await service.history(expense.id)
        assert [a.sequence for a in history] == [1, 2, 3]

    async def test_sequences_are_per_expense(self, db, employee, manager):
        service = ExpenseService(db)
        first = await _submit(service, employee["id"])
        second = await _submit(service, employee["id"])
        await service.approve(manager["id"], second.id)

        assert [a.sequence for a in await service.history(first.id)] == [1]
        assert [a.sequence for a in await service.history(second.id)] == [1, 2]

    async def test_timestamp_never_goes_backwards(self, db, employee, manager):
        """A clock that jumps back still yields a non-decreasing trail."""
        clock = FakeClock(step=timedelta(hours=-1))
        service = ExpenseService(db, clock=clock)
        expense = await _submit(service, employee["id"])
        await service.approve(manager["id"], expense.id)

        history = await service.history(expense.id)
        assert history[1].timestamp >= history[0].timestamp
        assert [a.action_type for a in history] == [
            ExpenseActionType.SUBMIT,
            ExpenseActionType.APPROVE,
        ]

    async def test_ties_keep_insertion_order(self, db, employee, manager, finance):
        """With a frozen clock the trail is ordered by insertion."""
        clock = FakeClock(step=timedelta(0))
        service = ExpenseService(db, clock=clock)
        expense = await _submit(service, employee["id"])
        await service.approve(manager["id"], expense.id)
        await service.reimburse(finance["id"], expense.id, comment="wire")

        history = await service.history(expense.id)
        assert len({a.timestamp for a in history}) == 1
        assert [a.action_type for a in history] == [
            ExpenseActionType.SUBMIT,
            ExpenseActionType.APPROVE,
            ExpenseActionType.REIMBURSE,
        ]

    async def test_record_uses_clock_at_write_time(self, db, employee):
        stamp = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
        service = ExpenseService(db)
        expense = await _submit(service, employee["id"])
        owner = await store.load_user(db, employee["id"])

        recorder = AuditRecorder(db, clock=lambda: stamp)
        action = await recorder.record(
            expense, owner, ExpenseActionType.SUBMIT, comment="re-filed",
        )
        await db.commit()

        assert action.id is not None
        assert action.timestamp == stamp
        assert action.sequence == 2
        assert action.comment == "re-filed"

    async def test_duplicate_sequence_is_rejected(self, db, employee):
        """The (expense_id, sequence) key stops two appends claiming one slot."""
        service = ExpenseService(db)
        expense = await _submit(service, employee["id"])

        db.add(ExpenseAction(
            expense_id=expense.id,
            actor_id=employee["id"],
            action_type=ExpenseActionType.SUBMIT,
            sequence=1,
            timestamp=datetime.now(timezone.utc),
        ))
        with pytest.raises(IntegrityError):
            await db.flush()
        await db.rollback()


class TestHistory:
    """AuditRecorder.history behaviour."""

    async def test_history_of_missing_expense_is_not_found(self, db):
        with pytest.raises(NotFoundException):
            await AuditRecorder(db).history(404)

    async def test_history_is_oldest_first(self, db, employee, manager):
        service = ExpenseService(db)
        expense = await _submit(service, employee["id"])
        await service.reject(manager["id"], expense.id, reason="duplicate")

        history = await AuditRecorder(db).history(expense.id)
        timestamps = [a.timestamp for a in history]
        assert timestamps == sorted(timestamps)
        assert history[0].action_type == ExpenseActionType.SUBMIT
        assert history[-1].action_type == ExpenseActionType.REJECT
        assert all(a.expense_id == expense.id for a in history)
