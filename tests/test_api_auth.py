"""
tests.test_api_auth

Authentication contract over HTTP: 401 only for a missing credential, 403 for a bad
one, login, and the verify-then-reissue flow.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
import structlog
from fastapi import Depends

from horizons_api.auth.deps import get_claim
from horizons_api.auth.models import Claim
from horizons_api.services.accounts import identity_for

POST_BODY = {"title": "Hello World", "content": "First!"}


@pytest.mark.asyncio
async def test_missing_header_is_401(client) -> None:
    r = await client.post("/posts", json=POST_BODY)

    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Unauthorized"}


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["Token abc.def.ghi", "Bearer", "Bearer not-a-jwt"])
async def test_present_but_unusable_header_is_403(client, header: str) -> None:
    r = await client.post("/posts", json=POST_BODY, headers={"Authorization": header})

    assert r.status_code == 403
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Forbidden"
    assert body["errors"]


@pytest.mark.asyncio
async def test_expired_token_is_403(app, client, make_user, bearer) -> None:
    user, _ = await make_user("ada")
    expired = app.state.tokens.issue(identity_for(user), ttl=timedelta(seconds=-1))

    r = await client.post("/posts", json=POST_BODY, headers=bearer(expired))

    assert r.status_code == 403
    assert r.json()["message"] == "Forbidden"


@pytest.mark.asyncio
async def test_login_issues_a_verifiable_token(app, client, make_user) -> None:
    user, _ = await make_user("ada", password="s3cret-passphrase")

    r = await client.post("/login", json={"email": "ada@example.com", "password": "s3cret-passphrase"})

    assert r.status_code == 200
    claim = app.state.tokens.verify(r.json()["token"])
    assert claim.user_id == str(user.id)
    assert claim.slug == "ada"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "credentials",
    [
        {"email": "ada@example.com", "password": "wrong-passphrase"},
        {"email": "nobody@example.com", "password": "s3cret-passphrase"},
    ],
)
async def test_bad_login_is_401(client, make_user, credentials) -> None:
    await make_user("ada", password="s3cret-passphrase")

    r = await client.post("/login", json=credentials)

    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_unverified_user_is_admitted_after_reissue(client, make_user, bearer) -> None:
    _, token = await make_user("newbie", is_verified=False)

    r = await client.post("/posts", json=POST_BODY, headers=bearer(token))
    assert r.status_code == 403

    r = await client.patch("/verification", headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["data"]["isVerified"] is True
    fresh = r.json()["token"]

    # The old token still carries isVerified=false.
    r = await client.post("/posts", json=POST_BODY, headers=bearer(token))
    assert r.status_code == 403

    r = await client.post("/posts", json=POST_BODY, headers=bearer(fresh))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_unverified_admin_may_write(client, make_user, bearer) -> None:
    _, token = await make_user("root", is_admin=True, is_verified=False)

    r = await client.post("/posts", json=POST_BODY, headers=bearer(token))

    assert r.status_code == 200


@pytest.mark.asyncio
async def test_signup_then_duplicate_is_409(client) -> None:
    body = {
        "firstName": "Grace",
        "lastName": "Hopper",
        "username": "Grace Hopper",
        "email": "grace@example.com",
        "password": "compilers-rule",
    }

    r = await client.post("/users", json=body)
    assert r.status_code == 200
    assert r.json()["data"]["slug"] == "grace-hopper"
    assert r.json()["data"]["isVerified"] is False

    r = await client.post("/users", json=body)
    assert r.status_code == 409
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_signup_cannot_grant_itself_admin(client) -> None:
    r = await client.post(
        "/users",
        json={
            "firstName": "Mallory",
            "lastName": "X",
            "username": "mallory",
            "email": "mallory@example.com",
            "password": "let-me-in-please",
            "isAdmin": True,
        },
    )

    assert r.status_code == 400
    assert r.json()["message"] == "Bad Request"


@pytest.mark.asyncio
async def test_healthz_and_readyz(client) -> None:
    assert (await client.get("/healthz")).json() == {"status": "ok"}
    assert (await client.get("/readyz")).json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client) -> None:
    r = await client.get("/nope")

    assert r.status_code == 404
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_authenticated_user_id_reaches_endpoint_log_context(
    app, client, make_user, bearer
) -> None:
    user, token = await make_user("ada")

    @app.get("/log-context")
    async def log_context(claim: Claim = Depends(get_claim)) -> dict[str, str]:
        return dict(structlog.contextvars.get_contextvars())

    r = await client.get("/log-context", headers=bearer(token))

    assert r.status_code == 200
    context = r.json()
    assert context["user_id"] == str(user.id)
    assert context["path"] == "/log-context"
    assert "request_id" in context
