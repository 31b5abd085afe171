from __future__ import annotations

import uuid

import pytest
from sqlalchemy.sql.elements import False_

from horizons_api.addressing.resolver import Filter, ResourceRef, resolve
from horizons_api.db.models import Comment, Post

POST_ID = uuid.UUID("5f0c8a1e-2b3d-4e5f-8a9b-0c1d2e3f4a5b")


@pytest.mark.parametrize(
    "segment",
    [str(POST_ID), str(POST_ID).upper(), POST_ID.hex],
)
def test_identifier_forms_resolve_to_id_filter(segment: str) -> None:
    assert resolve(segment) == Filter(field="id", value=POST_ID)


@pytest.mark.parametrize(
    "segment",
    ["cafe-life", "cafe-life-1", f"{{{POST_ID}}}", f"urn:uuid:{POST_ID}", str(POST_ID)[:-1], "zz" * 16],
)
def test_anything_else_is_a_slug(segment: str) -> None:
    assert resolve(segment) == Filter(field="slug", value=segment)


@pytest.mark.parametrize("segment", ["", None])
def test_empty_segment_falls_through_to_slug(segment: str | None) -> None:
    ref = ResourceRef.parse(segment)

    assert ref.kind == "slug"
    assert ref.value == ""


def test_id_ref_is_normalized_to_canonical_form() -> None:
    assert ResourceRef.parse(POST_ID.hex.upper()).value == str(POST_ID)


def test_slug_filter_on_model_without_slug_matches_nothing() -> None:
    assert isinstance(resolve("not-an-id").clause(Comment), False_)


def test_clause_targets_the_right_column() -> None:
    by_slug = resolve("cafe-life").clause(Post)
    by_id = resolve(str(POST_ID)).clause(Post)

    assert by_slug.left.key == "slug"
    assert by_id.left.key == "id"
