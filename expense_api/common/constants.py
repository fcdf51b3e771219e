"""Enums and constants for the expense workflow — stored as their string names."""

from __future__ import annotations

import enum
from typing import NamedTuple, Optional


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    FINANCE = "FINANCE"


# ── Expenses ────────────────────────────────────────────────────────

class ExpenseStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REIMBURSED = "REIMBURSED"


class ExpenseCategory(str, enum.Enum):
    TRAVEL = "TRAVEL"
    MEALS = "MEALS"
    LODGING = "LODGING"
    SUPPLIES = "SUPPLIES"
    OTHER = "OTHER"


class ExpenseActionType(str, enum.Enum):
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REIMBURSE = "REIMBURSE"


# ── Lifecycle state machine ─────────────────────────────────────────

class Transition(NamedTuple):
    """One edge of the expense state machine."""

    role: Optional[UserRole]
    source: Optional[ExpenseStatus]
    target: ExpenseStatus
    verb: str


# SUBMIT has no source state (it creates the expense) and any user may submit.
TRANSITIONS: dict[ExpenseActionType, Transition] = {
    ExpenseActionType.SUBMIT: Transition(
        None, None, ExpenseStatus.SUBMITTED, "submit",
    ),
    ExpenseActionType.APPROVE: Transition(
        UserRole.MANAGER, ExpenseStatus.SUBMITTED, ExpenseStatus.APPROVED, "approve",
    ),
    ExpenseActionType.REJECT: Transition(
        UserRole.MANAGER, ExpenseStatus.SUBMITTED, ExpenseStatus.REJECTED, "reject",
    ),
    ExpenseActionType.REIMBURSE: Transition(
        UserRole.FINANCE, ExpenseStatus.APPROVED, ExpenseStatus.REIMBURSED, "reimburse",
    ),
}

TERMINAL_STATUSES = frozenset({ExpenseStatus.REJECTED, ExpenseStatus.REIMBURSED})

# ── Misc constants ──────────────────────────────────────────────────

DEFAULT_CURRENCY = "USD"
MAX_DESCRIPTION_LENGTH = 500
MAX_COMMENT_LENGTH = 500
