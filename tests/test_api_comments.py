from __future__ import annotations

import uuid

import pytest


async def _post(client, bearer, token: str, title: str = "Parent Post") -> dict:
    r = await client.post("/posts", json={"title": title, "content": "..."}, headers=bearer(token))
    return r.json()["data"]


async def _comment(client, bearer, token: str, post_ref: str, text: str = "Nice") -> dict:
    r = await client.post(f"/posts/{post_ref}/comments", json={"text": text}, headers=bearer(token))
    assert r.status_code == 200, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_parent_may_be_addressed_by_slug_or_id(client, make_user, bearer) -> None:
    user, token = await make_user("ada")
    post = await _post(client, bearer, token)

    comment = await _comment(client, bearer, token, post["slug"])

    assert comment["postId"] == post["id"]
    assert comment["userId"] == str(user.id)
    by_slug = await client.get(f"/posts/{post['slug']}/comments/{comment['id']}")
    by_id = await client.get(f"/posts/{post['id']}/comments/{comment['id']}")
    assert by_slug.json()["data"] == by_id.json()["data"]

    listing = await client.get(f"/posts/{post['slug']}/comments")
    assert [c["id"] for c in listing.json()["data"]] == [comment["id"]]


@pytest.mark.asyncio
async def test_comment_is_scoped_to_its_post(client, make_user, bearer) -> None:
    _, token = await make_user("ada")
    first = await _post(client, bearer, token, "First")
    second = await _post(client, bearer, token, "Second")
    comment = await _comment(client, bearer, token, first["slug"])

    r = await client.get(f"/posts/{second['slug']}/comments/{comment['id']}")

    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("comment_ref", ["not-an-id", str(uuid.uuid4())])
async def test_unknown_comment_is_404(client, make_user, bearer, comment_ref: str) -> None:
    _, token = await make_user("ada")
    post = await _post(client, bearer, token)

    r = await client.get(f"/posts/{post['slug']}/comments/{comment_ref}")

    assert r.status_code == 404


@pytest.mark.asyncio
async def test_comments_on_missing_post_are_404(client, make_user, bearer) -> None:
    _, token = await make_user("ada")

    assert (await client.get("/posts/ghost/comments")).status_code == 404
    r = await client.post("/posts/ghost/comments", json={"text": "boo"}, headers=bearer(token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_only_author_or_admin_edits_comment(client, make_user, bearer) -> None:
    _, alice = await make_user("alice")
    _, bob = await make_user("bob")
    _, admin = await make_user("admin", is_admin=True)
    post = await _post(client, bearer, alice)
    comment = await _comment(client, bearer, bob, post["slug"], "bob was here")
    url = f"/posts/{post['slug']}/comments/{comment['id']}"

    # The post author does not own other people's comments.
    r = await client.patch(url, json={"text": "alice was here"}, headers=bearer(alice))
    assert r.status_code == 403

    r = await client.patch(url, json={"text": "bob edited"}, headers=bearer(bob))
    assert r.status_code == 200
    assert r.json()["data"]["text"] == "bob edited"

    r = await client.delete(url, headers=bearer(admin))
    assert r.status_code == 200
    assert (await client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_unverified_user_cannot_comment(client, make_user, bearer) -> None:
    _, alice = await make_user("alice")
    _, lurker = await make_user("lurker", is_verified=False)
    post = await _post(client, bearer, alice)

    r = await client.post(f"/posts/{post['slug']}/comments", json={"text": "hi"}, headers=bearer(lurker))

    assert r.status_code == 403


@pytest.mark.asyncio
async def test_only_admin_may_attribute_comment_to_someone_else(client, make_user, bearer) -> None:
    alice, alice_token = await make_user("alice")
    bob, bob_token = await make_user("bob")
    _, admin = await make_user("admin", is_admin=True)
    post = await _post(client, bearer, alice_token)
    url = f"/posts/{post['id']}/comments"

    r = await client.post(url, json={"text": "as bob", "userId": str(bob.id)}, headers=bearer(admin))
    assert r.json()["data"]["userId"] == str(bob.id)

    r = await client.post(url, json={"text": "as bob?", "userId": str(bob.id)}, headers=bearer(alice_token))
    assert r.json()["data"]["userId"] == str(alice.id)

    r = await client.post(url, json={"text": "ghost", "userId": str(uuid.uuid4())}, headers=bearer(admin))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_put_replaces_text_but_not_authorship(client, make_user, bearer) -> None:
    bob, bob_token = await make_user("bob")
    alice, alice_token = await make_user("alice")
    _, admin = await make_user("admin", is_admin=True)
    post = await _post(client, bearer, alice_token)
    comment = await _comment(client, bearer, bob_token, post["slug"], "first take")
    url = f"/posts/{post['slug']}/comments/{comment['id']}"

    r = await client.put(url, json={"text": "hijack"}, headers=bearer(alice_token))
    assert r.status_code == 403

    r = await client.put(url, json={"text": "second take"}, headers=bearer(bob_token))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["text"] == "second take"
    assert data["userId"] == str(bob.id)
    assert data["postId"] == post["id"]

    # A replacement body cannot carry a new author, even from an admin.
    r = await client.put(url, json={"text": "moved", "userId": str(alice.id)}, headers=bearer(admin))
    assert r.status_code == 400

    r = await client.put(url, json={}, headers=bearer(bob_token))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_comments_list_in_creation_order(client, make_user, bearer) -> None:
    _, token = await make_user("ada")
    post = await _post(client, bearer, token)
    texts = ["one", "two", "three", "four"]
    for text in texts:
        await _comment(client, bearer, token, post["slug"], text)

    r = await client.get(f"/posts/{post['slug']}/comments")
    assert [c["text"] for c in r.json()["data"]] == texts

    r = await client.get(f"/posts/{post['slug']}/comments", params={"sort": "-createdAt"})
    assert [c["text"] for c in r.json()["data"]] == texts[::-1]
