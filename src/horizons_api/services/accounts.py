"""
horizons_api.services.accounts

Account lifecycle service (transaction owner for user writes).

Responsibilities:
- Sign up users with a unique username slug and a hashed password.
- Authenticate by email/password and issue a session token.
- Apply profile updates and complete email verification, reissuing the token so
  the client sees the new identity/flags.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.auth.jwt import TokenService
from horizons_api.auth.models import UserIdentity
from horizons_api.auth.passwords import hash_password, verify_password
from horizons_api.db.models import User
from horizons_api.db.repositories.users import UserRepo
from horizons_api.errors import Conflict, NotFound, Unauthenticated
from horizons_api.observability.logging import get_logger
from horizons_api.settings import Settings

log = get_logger(__name__)


def identity_for(user: User) -> UserIdentity:
    return UserIdentity(
        user_id=str(user.id),
        username=user.username,
        slug=user.slug,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        is_admin=user.is_admin,
        is_verified=user.is_verified,
    )


class AccountService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        tokens: TokenService,
        slugs: SlugGenerator,
    ) -> None:
        self._session = session
        self._settings = settings
        self._tokens = tokens
        self._slugs = slugs
        self._users = UserRepo(session)

    def issue_token(self, user: User) -> str:
        return self._tokens.issue(identity_for(user))

    async def signup(
        self,
        *,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        password: str,
        is_admin: bool = False,
        is_verified: bool = False,
    ) -> User:
        await self._ensure_available(username=username, email=email)
        user = await self._users.create(
            self._slugs,
            first_name=first_name,
            last_name=last_name,
            username=username,
            email=email,
            password_hash=self._hash(password),
            is_admin=is_admin,
            is_verified=is_verified,
        )
        await self._session.commit()
        log.info("user_created", user_id=str(user.id), slug=user.slug)
        return user

    async def login(self, *, email: str, password: str) -> tuple[User, str]:
        user = await self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            log.info("login_failed")
            raise Unauthenticated("Invalid email or password")
        log.info("login_succeeded", user_id=str(user.id))
        return user, self.issue_token(user)

    async def update_profile(self, user: User, fields: dict[str, Any]) -> User:
        fields = dict(fields)
        await self._ensure_available(
            username=fields.get("username"), email=fields.get("email"), exclude_id=user.id
        )
        if "password" in fields:
            fields["password_hash"] = self._hash(fields.pop("password"))
        updated = await self._users.update(self._slugs, user, fields)
        if updated is None:
            raise NotFound("User not found")
        await self._session.commit()
        return updated

    async def complete_verification(self, user_id: uuid.UUID) -> tuple[User, str]:
        user = await self._users.set_verified(user_id)
        if user is None:
            raise NotFound("User not found")
        await self._session.commit()
        log.info("user_verified", user_id=str(user.id))
        return user, self.issue_token(user)

    async def delete(self, user: User) -> None:
        await self._users.delete(user)
        await self._session.commit()
        log.info("user_deleted", user_id=str(user.id))

    async def _ensure_available(
        self,
        *,
        username: str | None,
        email: str | None,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        taken = await self._users.find_taken(username=username, email=email, exclude_id=exclude_id)
        if taken:
            raise Conflict(
                "Username or email already in use",
                errors=[f"{field} is already taken" for field in taken],
            )

    def _hash(self, password: str) -> str:
        return hash_password(password, iterations=self._settings.password_hash_iterations)


# --- Module Notes -----------------------------------------------------------
# The availability check is advisory; the unique indexes on username/email remain
# authoritative and a lost race ends as a 409 from `SlugGenerator.save`.
