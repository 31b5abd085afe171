"""
horizons_api.db.repositories.comments

Repository for `Comment` entities.

Responsibilities:
- Scope every read/write to a parent post id.
- Expose the owner lookup used by the ownership guard.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import ClassVar

from sqlalchemy import select

from horizons_api.addressing.resolver import Filter
from horizons_api.db.models import Comment
from horizons_api.db.repositories.base import Repo, SortKey


class CommentRepo(Repo[Comment]):
    model = Comment
    sortable: ClassVar[dict[str, str]] = {
        "id": "id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    async def create(self, *, post_id: uuid.UUID, user_id: uuid.UUID, text: str) -> Comment:
        comment = Comment(post_id=post_id, user_id=user_id, text=text)
        self._session.add(comment)
        await self._session.flush()
        return comment

    async def get_in_post(self, post_id: uuid.UUID, flt: Filter) -> Comment | None:
        stmt = select(Comment).where(Comment.post_id == post_id, flt.clause(Comment))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_post(
        self,
        post_id: uuid.UUID,
        *,
        offset: int = 0,
        limit: int | None = None,
        sort: Sequence[SortKey] = (),
    ) -> list[Comment]:
        stmt = (
            self._select()
            .where(Comment.post_id == post_id)
            .order_by(*self._ordering(sort))
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_text(self, comment: Comment, text: str) -> Comment:
        comment.text = text
        await self._session.flush()
        return comment

    async def owner_in_post(self, post_id: uuid.UUID, flt: Filter) -> uuid.UUID | None:
        stmt = select(Comment.user_id).where(Comment.post_id == post_id, flt.clause(Comment))
        return (await self._session.execute(stmt)).scalar_one_or_none()
