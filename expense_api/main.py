"""Expense Reimbursement API — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from expense_api.common.exceptions import register_exception_handlers
from expense_api.common.logging import init_logging, request_context_middleware
from expense_api.common.rate_limit import limiter
from expense_api.config import settings
from expense_api.database import async_session_factory, engine
from expense_api.expenses.router import router as expenses_router
from expense_api.users.router import router as users_router
from expense_api.users.service import UserService

logger = logging.getLogger("expense_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    if settings.SEED_DEMO_USERS:
        async with async_session_factory() as session:
            await UserService.seed_demo_users(session)
    logger.info("expense api started (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    init_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Expense Reimbursement API",
        description="Expense submission, manager approval and finance reimbursement with a full audit trail",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request id / structured logging
    app.middleware("http")(request_context_middleware)

    # Health check
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(expenses_router, prefix="/api/v1/expenses", tags=["expenses"])
    app.include_router(users_router, prefix="/api/v1/users", tags=["users"])

    return app


app = create_app()
