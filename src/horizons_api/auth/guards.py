"""
horizons_api.auth.guards

Authorization predicates over a verified `Claim`.

Each predicate answers admit/deny only; `auth.deps` turns a deny into the right error
and composes them into FastAPI dependency chains.
"""

from __future__ import annotations

import uuid

from horizons_api.auth.models import Claim


def is_admin(claim: Claim) -> bool:
    return claim.is_admin


def can_write(claim: Claim) -> bool:
    # Unverified accounts may read and manage themselves but not author content.
    return claim.is_admin or claim.is_verified


def is_self_or_admin(claim: Claim, target_id: uuid.UUID | None) -> bool:
    """
    `target_id` is the stored id of the addressed user (None if there is none).

    Only the id in the claim is compared; the slug in a token can be stale.
    """

    if claim.is_admin:
        return True
    if target_id is None or not _is_uuid(claim.user_id):
        return False
    return uuid.UUID(claim.user_id) == target_id


def is_owner_or_admin(claim: Claim, owner_id: uuid.UUID | str) -> bool:
    if claim.is_admin:
        return True
    return _is_uuid(claim.user_id) and uuid.UUID(claim.user_id) == uuid.UUID(str(owner_id))


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError):
        return False
    return True
