"""
horizons_api.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Claim` (401 when absent, 403 when bad).
- Enforce role/ownership rules via reusable dependency factories.

Guards run in the order a route declares them; each one depends on `get_claim`,
which FastAPI resolves once per request.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Mapping

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.resolver import resolve_id
from horizons_api.api.deps import db_session, token_service_dep
from horizons_api.auth import guards
from horizons_api.auth.jwt import TokenError, TokenService
from horizons_api.auth.models import Claim
from horizons_api.db.models import User
from horizons_api.errors import Forbidden, InvalidCredential, NotFound, Unauthenticated
from horizons_api.observability.logging import get_logger

log = get_logger(__name__)

# auto_error=False: the 401/403 split is decided here, not by FastAPI.
_bearer = HTTPBearer(auto_error=False)

OwnerLookup = Callable[[AsyncSession, Mapping[str, str]], Awaitable[uuid.UUID | None]]


async def get_claim(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenService = Depends(token_service_dep),
) -> Claim:
    if creds is None or not creds.credentials:
        if "authorization" not in request.headers:
            raise Unauthenticated()
        log.info("token_rejected", reason="malformed authorization header")
        raise InvalidCredential(errors=["Authorization header must be 'Bearer <token>'"])

    try:
        claim = tokens.verify(creds.credentials)
    except TokenError as e:
        log.info("token_rejected", reason=str(e))
        raise InvalidCredential(errors=[str(e)]) from e

    # Bound in the request task (this dependency is async), so endpoint logs carry it.
    structlog.contextvars.bind_contextvars(user_id=claim.user_id)
    return claim


def _deny(guard: str, claim: Claim, **extra: object) -> Forbidden:
    log.info("access_denied", guard=guard, user_id=claim.user_id, **extra)
    return Forbidden()


async def require_verified(claim: Claim = Depends(get_claim)) -> Claim:
    if not guards.can_write(claim):
        raise _deny("verified", claim)
    return claim


async def require_admin(claim: Claim = Depends(get_claim)) -> Claim:
    if not guards.is_admin(claim):
        raise _deny("admin", claim)
    return claim


def require_self_or_admin(param: str = "id"):
    async def _dep(
        request: Request,
        claim: Claim = Depends(get_claim),
        session: AsyncSession = Depends(db_session),
    ) -> Claim:
        if guards.is_admin(claim):
            return claim
        target = request.path_params.get(param, "")
        target_id = await resolve_id(session, User, target)
        if not guards.is_self_or_admin(claim, target_id):
            raise _deny("self", claim, target=target)
        return claim

    return _dep


def require_owner_or_admin(owner_lookup: OwnerLookup, *, resource: str):
    """
    Admit admins outright; otherwise fetch the resource owner and compare.

    A missing resource is a 404, a resource owned by someone else a 403.
    """

    async def _dep(
        request: Request,
        claim: Claim = Depends(get_claim),
        session: AsyncSession = Depends(db_session),
    ) -> Claim:
        if guards.is_admin(claim):
            return claim
        owner_id = await owner_lookup(session, request.path_params)
        if owner_id is None:
            raise NotFound(f"{resource} not found")
        if not guards.is_owner_or_admin(claim, owner_id):
            raise _deny("owner", claim, resource=resource)
        return claim

    return _dep


# --- Module Notes -----------------------------------------------------------
# Self checks resolve the path segment to a stored user id before comparing; a
# token's slug goes stale on rename and may later belong to another account.
# Ownership checks and the mutation that follows are separate statements; a
# concurrent delete between them surfaces as a 404 from the handler.
