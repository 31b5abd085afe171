from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.addressing.resolver import resolve
from horizons_api.addressing.slugs import SlugGenerator
from horizons_api.api.deps import db_session, slug_generator_dep
from horizons_api.api.schemas import (
    CategoryCreate,
    CategoryOut,
    CategoryPatch,
    dump,
    envelope,
    sort_order,
)
from horizons_api.auth.deps import require_admin
from horizons_api.db.models import Category
from horizons_api.db.repositories.categories import CategoryRepo
from horizons_api.errors import Conflict, NotFound

router = APIRouter(prefix="/categories", tags=["categories"])


async def _get_category(repo: CategoryRepo, ref: str) -> Category:
    category = await repo.get(resolve(ref))
    if category is None:
        raise NotFound("Category not found")
    return category


@router.get("")
async def list_categories(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=100),
    sort: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    categories = await CategoryRepo(session).list_page(
        offset=offset, limit=limit, sort=sort_order(sort, CategoryRepo.sortable)
    )
    return envelope(
        "Categories fetched from database",
        [dump(CategoryOut, c) for c in categories],
        count=len(categories),
    )


@router.get("/{id}")
async def get_category(id: str, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    category = await _get_category(CategoryRepo(session), id)
    return envelope(f"Category '{category.name}' fetched from database", dump(CategoryOut, category))


@router.post("", dependencies=[Depends(require_admin)])
async def create_category(
    body: CategoryCreate,
    session: AsyncSession = Depends(db_session),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> dict[str, Any]:
    repo = CategoryRepo(session)
    if await repo.name_taken(body.name):
        raise Conflict("Category name already exists")
    category = await repo.create(slugs, name=body.name, description=body.description)
    await session.commit()
    return envelope(f"Category '{category.name}' saved to database", dump(CategoryOut, category))


@router.patch("/{id}", dependencies=[Depends(require_admin)])
async def update_category(
    id: str,
    body: CategoryPatch,
    session: AsyncSession = Depends(db_session),
    slugs: SlugGenerator = Depends(slug_generator_dep),
) -> dict[str, Any]:
    repo = CategoryRepo(session)
    category = await _get_category(repo, id)
    changes = body.changes()
    if "name" in changes and await repo.name_taken(changes["name"], exclude_id=category.id):
        raise Conflict("Category name already exists")
    updated = await repo.update(slugs, category, changes)
    if updated is None:
        raise NotFound("Category not found")
    await session.commit()
    return envelope(f"Category '{updated.name}' updated in database", dump(CategoryOut, updated))


@router.delete("/{id}", dependencies=[Depends(require_admin)])
async def delete_category(id: str, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    repo = CategoryRepo(session)
    category = await _get_category(repo, id)
    data = dump(CategoryOut, category)
    await repo.delete(category)
    await session.commit()
    return envelope(f"Category '{category.name}' deleted from database", data)
