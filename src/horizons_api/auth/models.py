"""
horizons_api.auth.models

Auth domain models.

Responsibilities:
- Define the identity payload embedded in session tokens (`UserIdentity`).
- Define the decoded, verified claim injected into endpoints (`Claim`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """
    Identity-bearing subset of a user. Never holds secret material.
    """

    user_id: str
    username: str
    slug: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    is_admin: bool = False
    is_verified: bool = False

    def to_payload(self) -> dict[str, Any]:
        # Wire shape of the `user` claim; keys follow the public JSON contract.
        return {
            "_id": self.user_id,
            "username": self.username,
            "slug": self.slug,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "isAdmin": self.is_admin,
            "isVerified": self.is_verified,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> UserIdentity:
        user_id = data.get("_id")
        if not isinstance(user_id, str) or not user_id:
            raise ValueError("user claim is missing _id")
        return cls(
            user_id=user_id,
            username=str(data.get("username", "")),
            slug=str(data.get("slug", "")),
            first_name=str(data.get("firstName", "")),
            last_name=str(data.get("lastName", "")),
            email=str(data.get("email", "")),
            is_admin=data.get("isAdmin") is True,
            is_verified=data.get("isVerified") is True,
        )


@dataclass(frozen=True, slots=True)
class Claim:
    """
    Verified identity extracted from a bearer token.
    """

    user: UserIdentity
    issued_at: datetime
    expires_at: datetime

    @property
    def user_id(self) -> str:
        return self.user.user_id

    @property
    def slug(self) -> str:
        return self.user.slug

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

    @property
    def is_verified(self) -> bool:
        return self.user.is_verified

    @classmethod
    def from_token_payload(cls, payload: dict[str, Any]) -> Claim:
        user = payload.get("user")
        if not isinstance(user, dict):
            raise ValueError("token has no user claim")
        return cls(
            user=UserIdentity.from_payload(user),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )


# --- Module Notes -----------------------------------------------------------
# Flags are read strictly (`is True`) so a malformed payload never grants a role.
