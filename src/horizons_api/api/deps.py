"""
horizons_api.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the service objects
  built once in `create_app` (token service, slug generator).
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.auth.jwt import TokenService
from horizons_api.services.accounts import AccountService
from horizons_api.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def token_service_dep(request: Request) -> TokenService:
    return request.app.state.tokens  # type: ignore[attr-defined]


def slug_generator_dep(request: Request) -> SlugGenerator:
    return request.app.state.slugs  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Routers commit explicitly after a successful write.
    async with session_factory() as session:
        yield session


def accounts_dep(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    tokens: TokenService = Depends(token_service_dep),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> AccountService:
    return AccountService(session=session, settings=settings, tokens=tokens, slugs=slugs)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so guards and the endpoint share one
# session and one resolved claim.
