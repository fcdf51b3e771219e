"""Users Pydantic v2 schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from expense_api.common.constants import UserRole


class UserOut(BaseModel):
    """Public view of a user; the password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime
