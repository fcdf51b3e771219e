"""Read-model projection: ORM rows → response schemas.

Pure functions, no I/O. The owner must already be loaded on the expense.
"""

from __future__ import annotations

from expense_api.common.exceptions import InternalException
from expense_api.expenses.models import Expense, ExpenseAction
from expense_api.expenses.schemas import ExpenseActionOut, ExpenseOut


def to_response(expense: Expense) -> ExpenseOut:
    """Map an expense to its public representation.

    Raises:
        InternalException: the expense has no owner, which only a
            data-integrity bug can produce.
    """
    owner = expense.owner
    if owner is None or owner.id is None:
        raise InternalException(f"Expense {expense.id} has no owner.")

    return ExpenseOut(
        id=expense.id,
        user_id=owner.id,
        amount=expense.amount,
        currency=expense.currency,
        category=expense.category,
        description=expense.description,
        expense_date=expense.expense_date,
        status=expense.status,
        created_at=expense.created_at,
        updated_at=expense.updated_at,
    )


def to_action_response(action: ExpenseAction) -> ExpenseActionOut:
    return ExpenseActionOut.model_validate(action)
