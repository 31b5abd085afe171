"""
horizons_api.db.repositories.posts

Repository for `Post` entities.

Responsibilities:
- Create posts with a unique slug derived from the title.
- Replace/patch posts without touching authorship.
- Load the author and category alongside every post read.
- Expose the owner lookup used by the ownership guard.
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.base import ExecutableOption

from horizons_api.addressing.resolver import Filter
from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.db.models import Post
from horizons_api.db.repositories.base import SluggedRepo


class PostRepo(SluggedRepo[Post]):
    model = Post
    sortable: ClassVar[dict[str, str]] = {
        "id": "id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "title": "title",
        "isPublished": "is_published",
    }

    def _load_options(self) -> tuple[ExecutableOption, ...]:
        return (selectinload(Post.user), selectinload(Post.category))

    async def load(self, post_id: uuid.UUID) -> Post | None:
        # populate_existing: a changed category_id must not keep the stale category.
        stmt = (
            self._select()
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create(
        self, slugs: SlugGenerator, *, user_id: uuid.UUID, fields: dict[str, Any]
    ) -> Post:
        post = await self._insert(
            slugs, source=fields["title"], fields={**fields, "user_id": user_id}
        )
        return await self.load(post.id) or post

    async def update(
        self, slugs: SlugGenerator, post: Post, fields: dict[str, Any]
    ) -> Post | None:
        # `user_id` is never accepted here; authorship is fixed at creation.
        fields = {k: v for k, v in fields.items() if k != "user_id"}
        retitled = "title" in fields and fields["title"] != post.title
        updated = await self._update(
            slugs, post.id, fields=fields, source=fields["title"] if retitled else None
        )
        if updated is None:
            return None
        return await self.load(updated.id)

    async def owner_of(self, flt: Filter) -> uuid.UUID | None:
        stmt = select(Post.user_id).where(flt.clause(Post))
        return (await self._session.execute(stmt)).scalar_one_or_none()


# --- Module Notes -----------------------------------------------------------
# Deleting a post cascades to its comments through the ORM relationship.
# Relationships are loaded eagerly because an async session cannot lazy-load
# while a response is being serialized.
