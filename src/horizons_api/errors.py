"""
horizons_api.errors

Error taxonomy shared by guards, resolvers, repositories and routers.

Responsibilities:
- Map each failure kind to exactly one HTTP status.
- Carry a human-readable message plus optional detail entries for the client.
"""

from __future__ import annotations

from typing import Any

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)


class ApiError(Exception):
    """
    Base class for errors rendered as `{"success": false, "message": ..., "errors": [...]}`.
    """

    status_code: int = HTTP_400_BAD_REQUEST
    default_message: str = "Bad Request"

    def __init__(self, message: str | None = None, *, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)


class BadRequest(ApiError):
    pass


class Unauthenticated(ApiError):
    # No credential presented (or login credentials rejected).
    status_code = HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidCredential(ApiError):
    # A credential was presented but could not be verified.
    status_code = HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class Forbidden(ApiError):
    status_code = HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = HTTP_404_NOT_FOUND
    default_message = "Not Found"


class Conflict(ApiError):
    status_code = HTTP_409_CONFLICT
    default_message = "Conflict"


# --- Module Notes -----------------------------------------------------------
# HTTP rendering lives in `api.errors`; this module stays free of FastAPI imports
# so services and repositories can raise these without depending on the web layer.
