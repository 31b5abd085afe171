from __future__ import annotations

import uuid
from typing import Any, ClassVar

from sqlalchemy import select, update

from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.db.models import Category, Post
from horizons_api.db.repositories.base import SluggedRepo


class CategoryRepo(SluggedRepo[Category]):
    model = Category
    sortable: ClassVar[dict[str, str]] = {"id": "id", "createdAt": "created_at", "name": "name"}

    async def create(
        self, slugs: SlugGenerator, *, name: str, description: str | None = None
    ) -> Category:
        return await self._insert(
            slugs, source=name, fields={"name": name, "description": description}
        )

    async def update(
        self, slugs: SlugGenerator, category: Category, fields: dict[str, Any]
    ) -> Category | None:
        renamed = "name" in fields and fields["name"] != category.name
        return await self._update(
            slugs, category.id, fields=fields, source=fields["name"] if renamed else None
        )

    async def name_taken(self, name: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        holder = (
            await self._session.execute(select(Category.id).where(Category.name == name))
        ).scalar_one_or_none()
        return holder is not None and holder != exclude_id

    async def delete(self, entity: Category) -> None:
        # Posts outlive their category; detach them instead of leaving dangling ids.
        await self._session.execute(
            update(Post).where(Post.category_id == entity.id).values(category_id=None)
        )
        await super().delete(entity)
