"""Expenses router — submission, lookup and the approval workflow.

The acting user comes from the ``X-User-Id`` header.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from expense_api.auth.dependencies import get_actor_id
from expense_api.common.constants import ExpenseStatus
from expense_api.common.exceptions import ValidationException
from expense_api.database import get_db
from expense_api.expenses.projection import to_action_response, to_response
from expense_api.expenses.schemas import (
    ExpenseActionOut,
    ExpenseCreate,
    ExpenseOut,
    ExpenseReimburseRequest,
    ExpenseRejectRequest,
)
from expense_api.expenses.service import ExpenseService

router = APIRouter(prefix="", tags=["expenses"])


def get_expense_service(db: AsyncSession = Depends(get_db)) -> ExpenseService:
    return ExpenseService(db)


# ── POST / ───────────────────────────────────────────────────────────

@router.post("/", response_model=ExpenseOut, status_code=201)
async def create_expense(
    body: ExpenseCreate,
    actor_id: int = Depends(get_actor_id),
    service: ExpenseService = Depends(get_expense_service),
):
    """Submit a new expense owned by the acting user."""
    expense = await service.submit(
        owner_id=actor_id,
        amount=body.amount,
        currency=body.currency,
        category=body.category,
        description=body.description,
        expense_date=body.expense_date,
    )
    return to_response(expense)


# ── GET / ────────────────────────────────────────────────────────────

@router.get("/", response_model=list[ExpenseOut])
async def list_expenses(
    user_id: Optional[int] = Query(None, ge=0),
    status: Optional[ExpenseStatus] = Query(None),
    service: ExpenseService = Depends(get_expense_service),
):
    """List expenses of one user, or all expenses in one status."""
    if (user_id is None) == (status is None):
        raise ValidationException(
            {"query": ["Provide exactly one of 'user_id' or 'status'."]}
        )
    if user_id is not None:
        expenses = await service.list_by_user(user_id)
    else:
        expenses = await service.list_by_status(status)
    return [to_response(e) for e in expenses]


# ── GET /{expense_id} ────────────────────────────────────────────────

@router.get("/{expense_id}", response_model=ExpenseOut)
async def get_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    """Get a specific expense."""
    return to_response(await service.get_expense(expense_id))


# ── GET /{expense_id}/actions ────────────────────────────────────────

@router.get("/{expense_id}/actions", response_model=list[ExpenseActionOut])
async def get_expense_actions(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    """Audit trail of an expense, oldest first."""
    actions = await service.history(expense_id)
    return [to_action_response(a) for a in actions]


# ── PUT /{expense_id}/approve ────────────────────────────────────────

@router.put("/{expense_id}/approve", response_model=ExpenseOut)
async def approve_expense(
    expense_id: int,
    actor_id: int = Depends(get_actor_id),
    service: ExpenseService = Depends(get_expense_service),
):
    """Approve a submitted expense (MANAGER only)."""
    return to_response(await service.approve(actor_id, expense_id))


# ── PUT /{expense_id}/reject ─────────────────────────────────────────

@router.put("/{expense_id}/reject", response_model=ExpenseOut)
async def reject_expense(
    expense_id: int,
    body: ExpenseRejectRequest = ExpenseRejectRequest(),
    actor_id: int = Depends(get_actor_id),
    service: ExpenseService = Depends(get_expense_service),
):
    """Reject a submitted expense (MANAGER only)."""
    expense = await service.reject(actor_id, expense_id, reason=body.reason)
    return to_response(expense)


# ── PUT /{expense_id}/reimburse ──────────────────────────────────────

@router.put("/{expense_id}/reimburse", response_model=ExpenseOut)
async def reimburse_expense(
    expense_id: int,
    body: ExpenseReimburseRequest = ExpenseReimburseRequest(),
    actor_id: int = Depends(get_actor_id),
    service: ExpenseService = Depends(get_expense_service),
):
    """Mark an approved expense as paid out (FINANCE only)."""
    expense = await service.reimburse(actor_id, expense_id, comment=body.comment)
    return to_response(expense)
