"""Users module — User model, schemas and lookup service."""

from expense_api.users.models import User

__all__ = ["User"]
