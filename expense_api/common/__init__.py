"""Common module — shared enums, exceptions, logging and rate limiting."""

from expense_api.common.constants import (
    DEFAULT_CURRENCY,
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    TERMINAL_STATUSES,
    TRANSITIONS,
    ExpenseActionType,
    ExpenseCategory,
    ExpenseStatus,
    Transition,
    UserRole,
)
from expense_api.common.exceptions import (
    AppException,
    ForbiddenException,
    InternalException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "ExpenseActionType",
    "ExpenseCategory",
    "ExpenseStatus",
    "UserRole",
    "Transition",
    "TRANSITIONS",
    "TERMINAL_STATUSES",
    "DEFAULT_CURRENCY",
    "MAX_COMMENT_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    # Exceptions
    "AppException",
    "ForbiddenException",
    "InternalException",
    "InvalidStateException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
]
