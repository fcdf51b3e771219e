"""Expenses ORM models: Expense, ExpenseAction.

SQLAlchemy 2.0 async-compatible models. Relationships are ``lazy="raise"``:
every owner/actor the code needs is loaded explicitly by the store.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_api.common.constants import (
    DEFAULT_CURRENCY,
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    ExpenseActionType,
    ExpenseCategory,
    ExpenseStatus,
)
from expense_api.database import Base, UTCDateTime
from expense_api.users.models import User


class Expense(Base):
    """Employee reimbursement claim."""

    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(
        sa.String(3), nullable=False, default=DEFAULT_CURRENCY,
    )
    category: Mapped[ExpenseCategory] = mapped_column(
        sa.Enum(ExpenseCategory, name="expense_category", native_enum=False, length=20),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        sa.String(MAX_DESCRIPTION_LENGTH), nullable=False,
    )
    expense_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[ExpenseStatus] = mapped_column(
        sa.Enum(ExpenseStatus, name="expense_status", native_enum=False, length=20),
        nullable=False,
        default=ExpenseStatus.SUBMITTED,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    # Optimistic lock: every UPDATE is guarded by "WHERE version = <loaded>".
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    # Relationships
    owner = relationship(User, foreign_keys=[user_id], lazy="raise")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Expense #{self.id} {self.status.value} {self.amount} {self.currency}>"


class ExpenseAction(Base):
    """Immutable audit record of one lifecycle transition."""

    __tablename__ = "expense_actions"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    expense_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("users.id"),
        nullable=False,
    )
    action_type: Mapped[ExpenseActionType] = mapped_column(
        sa.Enum(ExpenseActionType, name="expense_action_type", native_enum=False, length=20),
        nullable=False,
    )
    comment: Mapped[Optional[str]] = mapped_column(sa.String(MAX_COMMENT_LENGTH))
    # 1-based position within the expense's trail
    sequence: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Relationships
    expense = relationship("Expense", foreign_keys=[expense_id], lazy="raise")
    actor = relationship(User, foreign_keys=[actor_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint(
            "expense_id", "sequence", name="uq_expense_actions_expense_sequence",
        ),
        sa.Index("ix_expense_actions_expense_timestamp", "expense_id", "timestamp"),
        sa.Index("ix_expense_actions_actor_id", "actor_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ExpenseAction #{self.sequence} {self.action_type.value}"
            f" expense={self.expense_id} by {self.actor_id}>"
        )
