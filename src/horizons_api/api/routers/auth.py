from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends

from horizons_api.api.deps import accounts_dep
from horizons_api.api.schemas import LoginRequest, UserOut, dump, envelope
from horizons_api.auth.deps import get_claim
from horizons_api.auth.models import Claim
from horizons_api.services.accounts import AccountService

router = APIRouter(tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(accounts_dep),
) -> dict[str, Any]:
    _, token = await accounts.login(email=body.email, password=body.password)
    return envelope("You are now authenticated", token=token)


@router.patch("/verification")
async def complete_verification(
    claim: Claim = Depends(get_claim),
    accounts: AccountService = Depends(accounts_dep),
) -> dict[str, Any]:
    # Flags in the presented token are stale until this reissue reaches the client.
    user, token = await accounts.complete_verification(uuid.UUID(claim.user_id))
    return envelope(f"User '{user.username}' is now verified", dump(UserOut, user), token=token)
