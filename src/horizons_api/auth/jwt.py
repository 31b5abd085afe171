"""
horizons_api.auth.jwt

Session token service.

Responsibilities:
- Issue signed tokens embedding a `UserIdentity` and a fixed expiry window.
- Decode and validate tokens with strict claim requirements (iss/aud/exp/iat).

Note:
- There is no refresh token. A changed admin/verified flag only reaches the client
  when a new token is issued (login, self profile update, verification).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from horizons_api.auth.models import Claim, UserIdentity
from horizons_api.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str
    ttl: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
            ttl=timedelta(hours=settings.token_ttl_hours),
        )


class TokenError(Exception):
    pass


class TokenService:
    def __init__(self, cfg: JwtConfig) -> None:
        if not cfg.secret:
            raise ValueError("JWT signing secret is not configured")
        self._cfg = cfg

    @property
    def ttl(self) -> timedelta:
        return self._cfg.ttl

    def issue(self, user: UserIdentity, *, ttl: timedelta | None = None) -> str:
        now = datetime.now(tz=UTC)
        payload: dict[str, Any] = {
            "user": user.to_payload(),
            "iss": self._cfg.issuer,
            "aud": self._cfg.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + (ttl if ttl is not None else self._cfg.ttl)).timestamp()),
        }
        return jwt.encode(payload, self._cfg.secret, algorithm=self._cfg.alg)

    def verify(self, token: str) -> Claim:
        try:
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                issuer=self._cfg.issuer,
                audience=self._cfg.audience,
                options={"require": ["exp", "iat", "iss", "aud"]},
            )
        except InvalidTokenError as e:
            raise TokenError(str(e)) from e

        try:
            return Claim.from_token_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise TokenError(f"Malformed token payload: {e}") from e


# --- Module Notes -----------------------------------------------------------
# One TokenService is built in `api.app.create_app` and kept on app.state; guards
# reach it through `api.deps.token_service_dep`.
