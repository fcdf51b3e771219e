"""Structured JSON logging stamped with the current request and actor.

``init_logging`` routes the root logger to stdout, one JSON object per line.
Two context variables follow a request through the app: the correlation id
set by ``request_context_middleware`` and the acting user's id set by the
``X-User-Id`` dependency. Every record carries both (``"-"`` outside a
request).
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_id_ctx: ContextVar[Optional[int]] = ContextVar("actor_id", default=None)

# LogRecord attributes that are not caller-supplied ``extra`` fields.
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class RequestContextFilter(logging.Filter):
    """Copy the request id and actor id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        actor = actor_id_ctx.get()
        record.actor_id = actor if actor is not None else "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # extra={...} fields, including the two stamped by the filter
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def init_logging(level: str = "info") -> None:
    """Configure the root logger once at app start."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved)


async def request_context_middleware(request: Request, call_next):  # type: ignore
    """Bind a request id (incoming ``X-Request-ID`` or a fresh one) and echo it back."""
    rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("expense_api.request")
    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.debug("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response
    finally:
        request_id_ctx.reset(token)
