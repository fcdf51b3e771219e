"""Auth dependencies — trusted actor identity.

Authentication happens upstream (gateway / reverse proxy); it forwards the
authenticated user's id in ``X-User-Id``. Only role checks happen here,
and those live in the expense service.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header
from fastapi.exceptions import HTTPException

from expense_api.common.logging import actor_id_ctx

ACTOR_HEADER = "X-User-Id"


async def get_actor_id(
    x_user_id: Optional[str] = Header(None, alias=ACTOR_HEADER),
) -> int:
    """Return the id of the user on whose authority the request runs.

    The id is also bound to the logging context for the rest of the request.
    """
    try:
        actor_id = int(x_user_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=401, detail=f"Missing or invalid {ACTOR_HEADER} header.",
        ) from None
    actor_id_ctx.set(actor_id)
    return actor_id
