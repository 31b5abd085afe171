"""
horizons_api.api.schemas

Request/response models.

Responsibilities:
- Allow-list the writable fields of each entity (create, replace, patch structs).
- Serialize ORM rows to the public camelCase JSON shape.

Patch structs are applied with `exclude_unset=True`: an omitted field is left alone,
while an explicit `false`, `[]` or `null` (where the column allows it) is written.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from horizons_api.addressing.slugs import SlugSourceError, slugify
from horizons_api.errors import BadRequest


def _sluggable(value: str) -> str:
    try:
        slugify(value)
    except SlugSourceError as e:
        raise ValueError("must contain at least one letter or digit") from e
    return value


def _lower_tags(tags: list[str]) -> list[str]:
    return [t.strip().lower() for t in tags if t.strip()]


# Source text for a slug: username, category name, post title.
SlugSource = Annotated[str, Field(min_length=1, max_length=100), AfterValidator(_sluggable)]
Name = Annotated[str, Field(min_length=1, max_length=100)]
Email = Annotated[str, Field(min_length=6, max_length=100, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]
Password = Annotated[str, Field(min_length=8, max_length=100)]
Body = Annotated[str, Field(min_length=1)]
Tags = Annotated[list[str], AfterValidator(_lower_tags)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class PatchModel(ApiModel):
    # Fields that may be omitted but never explicitly nulled.
    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_for_required_columns(self) -> PatchModel:
        nulled = sorted(
            name for name in self.model_fields_set & self.non_nullable if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"fields may not be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class OutModel(ApiModel):
    model_config = ConfigDict(from_attributes=True)


# --- Users ------------------------------------------------------------------


class UserCreate(ApiModel):
    first_name: Name
    last_name: Name
    username: SlugSource
    email: Email
    password: Password


class UserPatch(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"first_name", "last_name", "username", "email", "password"}
    )

    first_name: Name | None = None
    last_name: Name | None = None
    username: SlugSource | None = None
    email: Email | None = None
    password: Password | None = None


class LoginRequest(ApiModel):
    email: Annotated[str, Field(min_length=1, max_length=100)]
    password: Annotated[str, Field(min_length=1, max_length=100)]


class UserOut(OutModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    username: str
    slug: str
    is_verified: bool
    is_admin: bool


# --- Categories -------------------------------------------------------------


class CategoryCreate(ApiModel):
    name: SlugSource
    description: str | None = None


class CategoryPatch(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name"})

    name: SlugSource | None = None
    description: str | None = None


class CategoryOut(OutModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None


# --- Posts ------------------------------------------------------------------


class AuthorOut(OutModel):
    """Public author fields embedded in post reads."""

    id: uuid.UUID
    first_name: str
    last_name: str
    username: str
    slug: str


class PostWrite(ApiModel):
    """Body of POST and PUT: every field is written."""

    title: SlugSource
    content: Body
    is_published: bool = False
    category_id: uuid.UUID | None = None
    tags: Tags = Field(default_factory=list)


class PostPatch(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"title", "content", "is_published", "tags"})

    title: SlugSource | None = None
    content: Body | None = None
    is_published: bool | None = None
    category_id: uuid.UUID | None = None
    tags: Tags | None = None


class PostOut(OutModel):
    id: uuid.UUID
    title: str
    slug: str
    content: str
    user_id: uuid.UUID
    is_published: bool
    category_id: uuid.UUID | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    user: AuthorOut
    category: CategoryOut | None


# --- Comments ---------------------------------------------------------------


class CommentCreate(ApiModel):
    text: Body
    # Honored for admins only; everyone else comments as themselves.
    user_id: uuid.UUID | None = None


class CommentReplace(ApiModel):
    """Body of PUT: the text is replaced; author and parent post never change."""

    text: Body


class CommentPatch(PatchModel):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"text"})

    text: Body | None = None


class CommentOut(OutModel):
    id: uuid.UUID
    text: str
    user_id: uuid.UUID
    post_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


def sort_order(raw: str | None, sortable: Mapping[str, str]) -> list[tuple[str, bool]]:
    """
    Parse a `sort` query value such as `-createdAt,title` into (attribute, descending)
    pairs. Keys outside `sortable` are a 400.
    """

    keys: list[tuple[str, bool]] = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        desc = part.startswith("-")
        name = part.lstrip("+-")
        if name not in sortable:
            raise BadRequest(
                "Bad Request", errors=[f"Cannot sort by '{name}'; allowed: {', '.join(sortable)}"]
            )
        keys.append((sortable[name], desc))
    return keys


def dump(model: type[OutModel], obj: Any) -> dict[str, Any]:
    return model.model_validate(obj).model_dump(mode="json", by_alias=True)


def envelope(message: str, data: Any = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
