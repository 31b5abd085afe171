"""
tests.conftest

Shared fixtures: an app per test backed by a temp SQLite file, an in-process HTTP
client, and a factory that seeds users and mints their tokens.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from horizons_api.addressing.slugs import slugify
from horizons_api.api.app import create_app
from horizons_api.db.models import User
from horizons_api.services.accounts import AccountService
from horizons_api.settings import Settings

MakeUser = Callable[..., Awaitable[tuple[User, str]]]


@pytest.fixture
def settings(request, tmp_path) -> Settings:
    # Indirect parametrization overrides individual fields, e.g. slug_max_attempts.
    overrides = getattr(request, "param", {})
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'horizons-test.db'}",
        jwt_secret="test-signing-secret-with-enough-bytes-0123",
        password_hash_iterations=1_000,
        **overrides,
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx's ASGITransport does not run lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_user(app: FastAPI) -> MakeUser:
    async def _make(
        username: str,
        *,
        is_admin: bool = False,
        is_verified: bool = True,
        password: str = "correct-horse-battery",
    ) -> tuple[User, str]:
        async with app.state.sessionmaker() as session:
            accounts = AccountService(
                session=session,
                settings=app.state.settings,
                tokens=app.state.tokens,
                slugs=app.state.slugs,
            )
            user = await accounts.signup(
                first_name=username.title(),
                last_name="Tester",
                username=username,
                email=f"{slugify(username)}@example.com",
                password=password,
                is_admin=is_admin,
                is_verified=is_verified,
            )
            return user, accounts.issue_token(user)

    return _make


@pytest.fixture
def bearer() -> Callable[[str], dict[str, str]]:
    def _headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _headers
