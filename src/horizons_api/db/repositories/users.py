from __future__ import annotations

import uuid
from typing import Any, ClassVar

from sqlalchemy import select

from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.db.models import User
from horizons_api.db.repositories.base import SluggedRepo


class UserRepo(SluggedRepo[User]):
    model = User
    sortable: ClassVar[dict[str, str]] = {
        "id": "id",
        "createdAt": "created_at",
        "username": "username",
    }

    async def create(
        self,
        slugs: SlugGenerator,
        *,
        first_name: str,
        last_name: str,
        username: str,
        email: str,
        password_hash: str,
        is_admin: bool = False,
        is_verified: bool = False,
    ) -> User:
        return await self._insert(
            slugs,
            source=username,
            fields={
                "first_name": first_name,
                "last_name": last_name,
                "username": username,
                "email": email,
                "password_hash": password_hash,
                "is_admin": is_admin,
                "is_verified": is_verified,
            },
        )

    async def update(
        self, slugs: SlugGenerator, user: User, fields: dict[str, Any]
    ) -> User | None:
        # Slug follows the username, and only when the username actually changes.
        renamed = "username" in fields and fields["username"] != user.username
        return await self._update(
            slugs, user.id, fields=fields, source=fields["username"] if renamed else None
        )

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_taken(
        self, *, username: str | None, email: str | None, exclude_id: uuid.UUID | None = None
    ) -> list[str]:
        """
        Return which of `username`/`email` already belong to another user.
        """

        taken: list[str] = []
        for field, value in (("username", username), ("email", email)):
            if value is None:
                continue
            stmt = select(User.id).where(getattr(User, field) == value)
            holder = (await self._session.execute(stmt)).scalar_one_or_none()
            if holder is not None and holder != exclude_id:
                taken.append(field)
        return taken

    async def set_verified(self, user_id: uuid.UUID) -> User | None:
        user = await self._session.get(User, user_id, with_for_update=True)
        if user is None:
            return None
        user.is_verified = True
        await self._session.flush()
        return user
