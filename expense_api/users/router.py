"""Users router — read-only identity lookup."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from expense_api.database import get_db
from expense_api.users.schemas import UserOut
from expense_api.users.service import UserService

router = APIRouter(prefix="", tags=["users"])


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Look up a user and their role."""
    user = await UserService.get_user(db, user_id)
    return UserOut.model_validate(user)
