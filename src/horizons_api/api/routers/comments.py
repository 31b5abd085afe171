"""
horizons_api.api.routers.comments

Comment endpoints nested under a post.

Responsibilities:
- Normalize `{post_id}` (id or slug) to the post identifier before touching comments,
  since comments store their parent by identifier.
- Verified users comment; owner-or-admin replaces/edits/deletes. Authorship and the
  parent post are fixed at creation.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.resolver import resolve, resolve_id
from horizons_api.api.deps import db_session
from horizons_api.api.schemas import (
    CommentCreate,
    CommentOut,
    CommentPatch,
    CommentReplace,
    dump,
    envelope,
    sort_order,
)
from horizons_api.auth.deps import require_owner_or_admin, require_verified
from horizons_api.auth.models import Claim
from horizons_api.db.models import Comment, Post
from horizons_api.db.repositories.comments import CommentRepo
from horizons_api.db.repositories.users import UserRepo
from horizons_api.errors import BadRequest, NotFound

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


async def comment_owner(session: AsyncSession, params: Mapping[str, str]) -> uuid.UUID | None:
    post_id = await resolve_id(session, Post, params.get("post_id"))
    if post_id is None:
        return None
    return await CommentRepo(session).owner_in_post(post_id, resolve(params.get("comment_id")))


require_comment_owner = require_owner_or_admin(comment_owner, resource="Comment")


async def _post_id(session: AsyncSession, ref: str) -> uuid.UUID:
    post_id = await resolve_id(session, Post, ref)
    if post_id is None:
        raise NotFound("Post not found")
    return post_id


async def _get_comment(session: AsyncSession, post_ref: str, comment_ref: str) -> Comment:
    comment = await CommentRepo(session).get_in_post(
        await _post_id(session, post_ref), resolve(comment_ref)
    )
    if comment is None:
        raise NotFound(f"Comment '{comment_ref}' not found")
    return comment


@router.get("")
async def list_comments(
    post_id: str,
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=100),
    sort: str | None = Query(default=None, description="e.g. -createdAt"),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    comments = await CommentRepo(session).list_for_post(
        await _post_id(session, post_id),
        offset=offset,
        limit=limit,
        sort=sort_order(sort, CommentRepo.sortable),
    )
    return envelope(
        "Comments fetched from database",
        [dump(CommentOut, c) for c in comments],
        count=len(comments),
    )


@router.get("/{comment_id}")
async def get_comment(
    post_id: str, comment_id: str, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    comment = await _get_comment(session, post_id, comment_id)
    return envelope(f"Comment '{comment.id}' fetched from database", dump(CommentOut, comment))


@router.post("")
async def create_comment(
    post_id: str,
    body: CommentCreate,
    claim: Claim = Depends(require_verified),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    parent_id = await _post_id(session, post_id)
    author_id = uuid.UUID(claim.user_id)
    if claim.is_admin and body.user_id is not None:
        # Admins may attribute a comment to another user; authorship is fixed from here on.
        if await UserRepo(session).get_by_id(body.user_id) is None:
            raise BadRequest("Invalid user", errors=[f"Invalid user id: {body.user_id}"])
        author_id = body.user_id
    comment = await CommentRepo(session).create(post_id=parent_id, user_id=author_id, text=body.text)
    await session.commit()
    return envelope(f"Comment '{comment.id}' saved to database", dump(CommentOut, comment))


@router.put("/{comment_id}", dependencies=[Depends(require_comment_owner)])
async def replace_comment(
    post_id: str,
    comment_id: str,
    body: CommentReplace,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    comment = await _get_comment(session, post_id, comment_id)
    comment = await CommentRepo(session).set_text(comment, body.text)
    await session.commit()
    return envelope(f"Comment '{comment.id}' replaced in database", dump(CommentOut, comment))


@router.patch("/{comment_id}", dependencies=[Depends(require_comment_owner)])
async def update_comment(
    post_id: str,
    comment_id: str,
    body: CommentPatch,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    comment = await _get_comment(session, post_id, comment_id)
    changes = body.changes()
    if "text" in changes:
        comment = await CommentRepo(session).set_text(comment, changes["text"])
    await session.commit()
    return envelope(f"Comment '{comment.id}' updated in database", dump(CommentOut, comment))


@router.delete("/{comment_id}", dependencies=[Depends(require_comment_owner)])
async def delete_comment(
    post_id: str, comment_id: str, session: AsyncSession = Depends(db_session)
) -> dict[str, Any]:
    comment = await _get_comment(session, post_id, comment_id)
    data = dump(CommentOut, comment)
    await CommentRepo(session).delete(comment)
    await session.commit()
    return envelope(f"Comment '{comment.id}' deleted from database", data)
