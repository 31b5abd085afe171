"""
horizons_api.api.routers.users

User endpoints. `{id}` accepts a user id or a user slug.

Responsibilities:
- Public sign-up and profile reads.
- Self-or-admin profile updates/deletes; a self update returns a fresh token.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.resolver import resolve
from horizons_api.api.deps import accounts_dep, db_session
from horizons_api.api.schemas import UserCreate, UserOut, UserPatch, dump, envelope, sort_order
from horizons_api.auth.deps import require_self_or_admin
from horizons_api.auth.models import Claim
from horizons_api.db.models import User
from horizons_api.db.repositories.users import UserRepo
from horizons_api.errors import NotFound
from horizons_api.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user(session: AsyncSession, ref: str) -> User:
    user = await UserRepo(session).get(resolve(ref))
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("")
async def list_users(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=100),
    sort: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    users = await UserRepo(session).list_page(
        offset=offset, limit=limit, sort=sort_order(sort, UserRepo.sortable)
    )
    return envelope(
        "Users fetched from database",
        [dump(UserOut, u) for u in users],
        count=len(users),
    )


@router.get("/{id}")
async def get_user(id: str, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    user = await _get_user(session, id)
    return envelope(f"User '{user.username}' fetched from database", dump(UserOut, user))


@router.post("")
async def create_user(
    body: UserCreate,
    accounts: AccountService = Depends(accounts_dep),
) -> dict[str, Any]:
    user = await accounts.signup(**body.model_dump())
    return envelope(f"User '{user.username}' saved to database", dump(UserOut, user))


@router.patch("/{id}")
async def update_user(
    id: str,
    body: UserPatch,
    claim: Claim = Depends(require_self_or_admin("id")),
    session: AsyncSession = Depends(db_session),
    accounts: AccountService = Depends(accounts_dep),
) -> dict[str, Any]:
    user = await accounts.update_profile(await _get_user(session, id), body.changes())
    extra: dict[str, Any] = {}
    if str(user.id) == claim.user_id:
        # The caller's own identity changed; hand back a token that reflects it.
        extra["token"] = accounts.issue_token(user)
    return envelope(f"User '{user.username}' updated in database", dump(UserOut, user), **extra)


@router.delete("/{id}", dependencies=[Depends(require_self_or_admin("id"))])
async def delete_user(
    id: str,
    session: AsyncSession = Depends(db_session),
    accounts: AccountService = Depends(accounts_dep),
) -> dict[str, Any]:
    user = await _get_user(session, id)
    data = dump(UserOut, user)
    await accounts.delete(user)
    return envelope(f"User '{user.username}' deleted from database", data)
