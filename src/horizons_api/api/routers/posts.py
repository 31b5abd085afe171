"""
horizons_api.api.routers.posts

Post endpoints. `{id}` accepts a post id or a post slug.

Responsibilities:
- Public reads.
- Verified users create posts (authored by the caller).
- Owner-or-admin replace/patch/delete; the slug follows the title.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.resolver import resolve
from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.api.deps import db_session, slug_generator_dep
from horizons_api.api.schemas import PostOut, PostPatch, PostWrite, dump, envelope, sort_order
from horizons_api.auth.deps import require_owner_or_admin, require_verified
from horizons_api.auth.models import Claim
from horizons_api.db.models import Post
from horizons_api.db.repositories.categories import CategoryRepo
from horizons_api.db.repositories.posts import PostRepo
from horizons_api.errors import BadRequest, NotFound

router = APIRouter(prefix="/posts", tags=["posts"])


async def post_owner(session: AsyncSession, params: Mapping[str, str]) -> uuid.UUID | None:
    return await PostRepo(session).owner_of(resolve(params.get("id")))


require_post_owner = require_owner_or_admin(post_owner, resource="Post")


async def _get_post(repo: PostRepo, ref: str) -> Post:
    post = await repo.get(resolve(ref))
    if post is None:
        raise NotFound("Post not found")
    return post


async def _check_category(session: AsyncSession, category_id: uuid.UUID | None) -> None:
    if category_id is not None and await CategoryRepo(session).get_by_id(category_id) is None:
        raise BadRequest("Invalid category", errors=[f"Invalid category id: {category_id}"])


@router.get("")
async def list_posts(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=100),
    sort: str | None = Query(default=None, description="e.g. -createdAt,title"),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = PostRepo(session)
    posts = await repo.list_page(
        offset=offset, limit=limit, sort=sort_order(sort, repo.sortable)
    )
    return envelope("Posts fetched from database", [dump(PostOut, p) for p in posts], count=len(posts))


@router.get("/{id}")
async def get_post(id: str, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    post = await _get_post(PostRepo(session), id)
    return envelope(f"Post '{post.title}' fetched from database", dump(PostOut, post))


@router.post("")
async def create_post(
    body: PostWrite,
    claim: Claim = Depends(require_verified),
    session: AsyncSession = Depends(db_session),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> dict[str, Any]:
    await _check_category(session, body.category_id)
    post = await PostRepo(session).create(
        slugs, user_id=uuid.UUID(claim.user_id), fields=body.model_dump()
    )
    await session.commit()
    return envelope(f"Post '{post.title}' saved to database", dump(PostOut, post))


@router.put("/{id}", dependencies=[Depends(require_verified), Depends(require_post_owner)])
async def replace_post(
    id: str,
    body: PostWrite,
    session: AsyncSession = Depends(db_session),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> dict[str, Any]:
    repo = PostRepo(session)
    post = await _get_post(repo, id)
    await _check_category(session, body.category_id)
    updated = await repo.update(slugs, post, body.model_dump())
    if updated is None:
        raise NotFound("Post not found")
    await session.commit()
    return envelope(f"Post '{updated.title}' replaced in database", dump(PostOut, updated))


@router.patch("/{id}", dependencies=[Depends(require_verified), Depends(require_post_owner)])
async def update_post(
    id: str,
    body: PostPatch,
    session: AsyncSession = Depends(db_session),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> dict[str, Any]:
    repo = PostRepo(session)
    post = await _get_post(repo, id)
    changes = body.changes()
    await _check_category(session, changes.get("category_id"))
    updated = await repo.update(slugs, post, changes)
    if updated is None:
        raise NotFound("Post not found")
    await session.commit()
    return envelope(f"Post '{updated.title}' updated in database", dump(PostOut, updated))


@router.delete("/{id}", dependencies=[Depends(require_post_owner)])
async def delete_post(id: str, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    repo = PostRepo(session)
    post = await _get_post(repo, id)
    data = dump(PostOut, post)
    await repo.delete(post)
    await session.commit()
    return envelope(f"Post '{post.title}' deleted from database", data)


# --- Module Notes -----------------------------------------------------------
# The ownership guard and the handler each resolve `{id}`; a rename between the
# two surfaces as a 404 rather than acting on the wrong row.
