"""Expenses module — Expense/ExpenseAction models, lifecycle service, audit trail and router."""

from expense_api.expenses.models import Expense, ExpenseAction

__all__ = ["Expense", "ExpenseAction"]
