"""
horizons_api.addressing.resolver

Id-or-slug resolution for path parameters.

Responsibilities:
- Classify a path segment as a native identifier (UUID) or a slug, syntactically.
- Build a storage filter for either form.
- Normalize a parent reference to its identifier for nested resources.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy import ColumnElement, false, select
from sqlalchemy.ext.asyncio import AsyncSession

# Canonical hyphenated form or bare 32-hex form; braces/urn prefixes are slugs.
_ID_RE = re.compile(
    r"^(?:[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
    r"|[0-9a-fA-F]{32})$"
)


@dataclass(frozen=True, slots=True)
class ResourceRef:
    kind: Literal["id", "slug"]
    value: str

    @classmethod
    def parse(cls, segment: str | None) -> ResourceRef:
        segment = segment or ""
        if _ID_RE.match(segment):
            return cls(kind="id", value=str(uuid.UUID(segment)))
        return cls(kind="slug", value=segment)

    @property
    def is_id(self) -> bool:
        return self.kind == "id"


@dataclass(frozen=True, slots=True)
class Filter:
    """
    Equality filter on one field; `clause` renders it against an ORM model.
    """

    field: Literal["id", "slug"]
    value: Any

    def clause(self, model: Any) -> ColumnElement[bool]:
        column = getattr(model, self.field, None)
        if column is None:
            # Model is not slug-addressable; the fetch yields not-found.
            return false()
        return column == self.value


def resolve(segment: str | None) -> Filter:
    ref = ResourceRef.parse(segment)
    if ref.is_id:
        return Filter(field="id", value=uuid.UUID(ref.value))
    return Filter(field="slug", value=ref.value)


async def resolve_id(session: AsyncSession, model: Any, segment: str | None) -> uuid.UUID | None:
    """
    Return the identifier of the entity addressed by `segment`, or None if absent.

    Child rows store their parent link by identifier, so nested routes call this on
    the parent segment before filtering children.
    """

    stmt = select(model.id).where(resolve(segment).clause(model)).limit(1)
    return (await session.execute(stmt)).scalar_one_or_none()


# --- Module Notes -----------------------------------------------------------
# A 32-hex slug (e.g. a title made only of hex characters) would be read as an id.
# Slugs are derived from human text and this collision has not been worth a prefix.
