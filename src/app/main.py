"""
Application entry point.

`create_app()` is the composition root: settings, logging, the user store,
the database lifecycle, middleware, exception handlers and routers.
No business logic belongs here.
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import UnhandledErrorMiddleware, register_exception_handlers
from app.api.routes import health, productos, users
from app.config.settings import Settings, get_settings
from app.core.logging import AccessLogMiddleware, RequestIDMiddleware, setup_logging
from app.core.security import SecurityHeadersMiddleware
from app.database.session import close_database, init_database
from app.repositories.user_store import UserStore, default_seed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database client once at startup and dispose it at shutdown."""
    settings: Settings = app.state.settings
    database = init_database(settings.DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)
    if settings.DB_CREATE_TABLES:
        await database.create_all()
    logger.info("app.startup", extra={"env": settings.ENV, "port": settings.PORT})

    try:
        yield
    finally:
        await close_database()
        logger.info("app.shutdown")


def create_app(settings: Settings | None = None, user_store: UserStore | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: defaults to get_settings() (environment / .env).
        user_store: defaults to a store seeded with the sample users when
            SEED_USERS is true, an empty store otherwise.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Users & Productos API",
        docs_url="/docs" if settings.ENV == "development" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    if user_store is None:
        user_store = UserStore(seed=default_seed() if settings.SEED_USERS else None)
    app.state.user_store = user_store

    # Middleware: the last added runs first (outermost)
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(productos.router)
    if settings.ENABLE_PRODUCTO_WRITES:
        app.include_router(productos.write_router)

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
