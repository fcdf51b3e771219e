"""Expenses Pydantic v2 schemas — request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_api.common.constants import (
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    ExpenseActionType,
    ExpenseCategory,
    ExpenseStatus,
)


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class ExpenseCreate(BaseModel):
    """Submit a new expense."""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    # Empty or missing falls back to the default currency.
    currency: Optional[str] = Field(None, pattern=r"^([A-Za-z]{3})?$")
    category: ExpenseCategory
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    expense_date: date


class ExpenseRejectRequest(BaseModel):
    """Optional body for rejecting an expense."""

    reason: Optional[str] = Field(None, max_length=MAX_COMMENT_LENGTH)


class ExpenseReimburseRequest(BaseModel):
    """Optional body for reimbursing an expense."""

    comment: Optional[str] = Field(None, max_length=MAX_COMMENT_LENGTH)


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class ExpenseOut(BaseModel):
    """Full expense representation. Every field is always populated."""

    id: int
    user_id: int
    amount: Decimal
    currency: str
    category: ExpenseCategory
    description: str
    expense_date: date
    status: ExpenseStatus
    created_at: datetime
    updated_at: datetime


class ExpenseActionOut(BaseModel):
    """One entry of an expense's audit trail."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    expense_id: int
    actor_id: int
    action_type: ExpenseActionType
    comment: Optional[str] = None
    sequence: int
    timestamp: datetime
