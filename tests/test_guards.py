from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from horizons_api.auth import guards
from horizons_api.auth.models import Claim, UserIdentity

ALICE_ID = uuid.UUID("a11ce000-0000-4000-8000-000000000001")
BOB_ID = uuid.UUID("b0b00000-0000-4000-8000-000000000002")


def _claim(*, user_id: uuid.UUID = ALICE_ID, slug: str = "alice", **flags: bool) -> Claim:
    now = datetime.now(tz=UTC)
    return Claim(
        user=UserIdentity(user_id=str(user_id), username=slug, slug=slug, **flags),
        issued_at=now,
        expires_at=now + timedelta(hours=24),
    )


@pytest.mark.parametrize(
    ("is_admin", "is_verified", "expected"),
    [(False, False, False), (False, True, True), (True, False, True), (True, True, True)],
)
def test_can_write_requires_verified_or_admin(is_admin: bool, is_verified: bool, expected: bool) -> None:
    assert guards.can_write(_claim(is_admin=is_admin, is_verified=is_verified)) is expected


def test_is_admin() -> None:
    assert guards.is_admin(_claim(is_admin=True))
    assert not guards.is_admin(_claim(is_verified=True))


@pytest.mark.parametrize(
    ("target_id", "expected"),
    [(ALICE_ID, True), (BOB_ID, False), (None, False)],
)
def test_self_matches_resolved_user_id(target_id: uuid.UUID | None, expected: bool) -> None:
    assert guards.is_self_or_admin(_claim(), target_id) is expected


def test_slug_in_claim_is_not_used_for_self_check() -> None:
    # A claim minted before a rename still names the old slug; only the id counts.
    assert not guards.is_self_or_admin(_claim(slug="bob"), BOB_ID)


def test_admin_passes_self_check_for_anyone() -> None:
    assert guards.is_self_or_admin(_claim(is_admin=True), BOB_ID)
    assert guards.is_self_or_admin(_claim(is_admin=True), None)


def test_owner_check() -> None:
    assert guards.is_owner_or_admin(_claim(), ALICE_ID)
    assert guards.is_owner_or_admin(_claim(), str(ALICE_ID))
    assert not guards.is_owner_or_admin(_claim(), BOB_ID)
    assert guards.is_owner_or_admin(_claim(is_admin=True), BOB_ID)
