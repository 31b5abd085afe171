"""
horizons_api.db.repositories.base

Shared repository plumbing.

Responsibilities:
- Fetch by resolver `Filter`, by id, and page through a collection in creation
  order (or an allow-listed sort).
- Insert/update slug-addressable entities through `SlugGenerator`.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.base import ExecutableOption

from horizons_api.addressing.resolver import Filter
from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.db.base import Base

M = TypeVar("M", bound=Base)

# (model attribute, descending)
SortKey = tuple[str, bool]


class Repo(Generic[M]):
    model: ClassVar[type[Any]]
    # Public (camelCase) sort keys -> model attributes.
    sortable: ClassVar[dict[str, str]] = {"id": "id", "createdAt": "created_at"}

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _load_options(self) -> tuple[ExecutableOption, ...]:
        return ()

    def _select(self) -> Select[tuple[M]]:
        return select(self.model).options(*self._load_options())

    def _ordering(self, sort: Sequence[SortKey]) -> list[Any]:
        order = [
            getattr(self.model, attr).desc() if desc else getattr(self.model, attr).asc()
            for attr, desc in sort
        ]
        # Creation order breaks ties; ids are random and only make it total.
        return [*order, self.model.created_at.asc(), self.model.id.asc()]

    async def get(self, flt: Filter) -> M | None:
        stmt = self._select().where(flt.clause(self.model))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_id(self, entity_id: uuid.UUID) -> M | None:
        return await self._session.get(self.model, entity_id)

    async def list_page(
        self, *, offset: int = 0, limit: int | None = None, sort: Sequence[SortKey] = ()
    ) -> list[M]:
        stmt = self._select().order_by(*self._ordering(sort)).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, entity: M) -> None:
        await self._session.delete(entity)
        await self._session.flush()


class SluggedRepo(Repo[M]):
    async def slug_holder(self, slug: str) -> uuid.UUID | None:
        stmt = select(self.model.id).where(self.model.slug == slug)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def _insert(self, slugs: SlugGenerator, *, source: str, fields: dict[str, Any]) -> M:
        async def build() -> M:
            entity = self.model(**fields, slug=await slugs.generate(source, self.slug_holder))
            self._session.add(entity)
            return entity

        return await slugs.save(self._session, build)

    async def _update(
        self,
        slugs: SlugGenerator,
        entity_id: uuid.UUID,
        *,
        fields: dict[str, Any],
        source: str | None,
    ) -> M | None:
        # `build` reloads the row because a rollback in `slugs.save` expires it.
        async def build() -> M | None:
            entity = await self._session.get(self.model, entity_id)
            if entity is None:
                return None
            for name, value in fields.items():
                setattr(entity, name, value)
            if source is not None:
                entity.slug = await slugs.generate(source, self.slug_holder, exclude_id=entity_id)
            return entity

        return await slugs.save(self._session, build)


# --- Module Notes -----------------------------------------------------------
# `fields` always comes from an explicit allow-listed request struct; repositories
# never infer writable columns from the request body.
