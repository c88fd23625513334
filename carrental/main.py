"""
Builds the BCR API application: logging, database bootstrap on startup,
CORS, request logging, the login rate limiter, error bodies and the /v1 routes.

Run with ``uvicorn carrental.main:app``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carrental.api.v1.api import api_router
from carrental.api.v1.endpoints.auth import limiter
from carrental.core.config import settings
from carrental.core.exceptions import register_exception_handlers
from carrental.core.middleware import add_middleware
from carrental.db.init_db import init_db
from carrental.db.session import async_session_factory, engine

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with async_session_factory() as session:
        await init_db(engine, session)

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Binar Car Rental: customer registration, car catalog and bookings",
        version=settings.VERSION,
        openapi_url="/documentation.json",
        docs_url="/documentation",
        redoc_url=None,
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_middleware(application)

    # Login throttling
    application.state.limiter = limiter

    # Global exception handlers (uniform error body, no stack-trace leakage)
    register_exception_handlers(application)

    @application.get("/", tags=["status"])
    async def get_root() -> dict[str, str]:
        return {"status": "OK", "message": "BCR API is up and running!"}

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()
