"""
horizons_api.api.app

FastAPI app factory for the Horizons API.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Construct the service objects guards and routers depend on (token service,
  slug generator) from settings, once, and keep them on app.state.
- Initialize and dispose shared infrastructure (DB engine/session factory).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from horizons_api import __version__
from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.api.errors import register_error_handlers
from horizons_api.api.routers.auth import router as auth_router
from horizons_api.api.routers.categories import router as categories_router
from horizons_api.api.routers.comments import router as comments_router
from horizons_api.api.routers.health import router as health_router
from horizons_api.api.routers.posts import router as posts_router
from horizons_api.api.routers.users import router as users_router
from horizons_api.auth.jwt import JwtConfig, TokenService
from horizons_api.db.init_db import init_db
from horizons_api.db.session import create_engine, create_sessionmaker
from horizons_api.observability.logging import configure_logging, get_logger
from horizons_api.observability.middleware import RequestContextMiddleware
from horizons_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Horizons API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # A bad signing secret fails here, before the app can serve a request.
    app.state.settings = settings
    app.state.tokens = TokenService(JwtConfig.from_settings(settings))
    app.state.slugs = SlugGenerator(
        max_attempts=settings.slug_max_attempts,
        save_retries=settings.slug_save_retries,
    )

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(categories_router)
    app.include_router(posts_router)
    app.include_router(comments_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Nothing here reads configuration from module globals; tests build an app per
# Settings instance and get fully isolated service objects.
