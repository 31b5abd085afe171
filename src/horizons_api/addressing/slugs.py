"""
horizons_api.addressing.slugs

Unique, URL-safe slugs derived from entity names/titles/usernames.

Responsibilities:
- Transliterate free text into a lowercase hyphenated slug.
- Find the first free `base`, `base-1`, `base-2`, ... within a collection.
- Persist an entity under a unique index, rebuilding its slug when a concurrent
  writer won the race.
"""

from __future__ import annotations

import re
import unicodedata
import uuid
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from horizons_api.errors import Conflict
from horizons_api.observability.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

SlugLookup = Callable[[str], Awaitable[uuid.UUID | None]]

# Letters NFKD does not decompose into an ASCII base.
_TRANSLITERATIONS = str.maketrans(
    {
        "ß": "ss",
        "æ": "ae",
        "Æ": "ae",
        "œ": "oe",
        "Œ": "oe",
        "ø": "o",
        "Ø": "o",
        "đ": "d",
        "Đ": "d",
        "ł": "l",
        "Ł": "l",
        "þ": "th",
        "Þ": "th",
        "&": " and ",
    }
)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


class SlugSourceError(ValueError):
    pass


class SlugConflictError(Conflict):
    default_message = "Unable to allocate a unique slug"


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.translate(_TRANSLITERATIONS))
    ascii_text = decomposed.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM_RE.sub("-", ascii_text).strip("-")
    if not slug:
        raise SlugSourceError(f"Cannot derive a slug from {text!r}")
    return slug


class SlugGenerator:
    def __init__(self, *, max_attempts: int = 100, save_retries: int = 3) -> None:
        self._max_attempts = max_attempts
        self._save_retries = save_retries

    async def generate(
        self,
        source: str,
        lookup: SlugLookup,
        *,
        exclude_id: uuid.UUID | None = None,
    ) -> str:
        """
        Return the first candidate not held by another entity.

        `lookup(slug)` returns the id currently holding `slug`, or None. A slug held by
        `exclude_id` counts as free, so re-saving an entity keeps its own slug.
        """

        base = slugify(source)
        candidate = base
        for attempt in range(self._max_attempts):
            if attempt:
                candidate = f"{base}-{attempt}"
            holder = await lookup(candidate)
            if holder is None or (exclude_id is not None and holder == exclude_id):
                if attempt:
                    log.info("slug_collision_resolved", base=base, slug=candidate, probes=attempt + 1)
                return candidate

        log.warning("slug_attempts_exhausted", base=base, attempts=self._max_attempts)
        raise SlugConflictError(f"Slug '{base}' has no free variant")

    async def save(self, session: AsyncSession, build: Callable[[], Awaitable[T]]) -> T:
        """
        Run `build` (which stages the entity with a freshly generated slug) and flush.

        The unique index on `slug` is the real guarantee: when a concurrent insert took
        the same slug between probe and flush, roll back and build again.
        """

        for attempt in range(1, self._save_retries + 1):
            entity = await build()
            try:
                await session.flush()
            except IntegrityError as e:
                await session.rollback()
                log.warning("slug_save_conflict", attempt=attempt, error=str(e.orig))
                continue
            return entity

        raise SlugConflictError("Concurrent writes kept taking the generated slug")


# --- Module Notes -----------------------------------------------------------
# `save` rolls back the whole session transaction on conflict, so callers stage
# nothing else before it and commit right after.
