"""Integration tests for the HTTP API running against the local backend."""
from __future__ import annotations

import asyncio
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from ranksocial.backend import get_backend
from ranksocial.clients import LocalBackend
from ranksocial.constants import ACCESS_DENIED_MESSAGE, EMPTY_FEED_MESSAGE, OWNER_RANK_PRIORITY, PASSWORD_MISMATCH_MESSAGE
from ranksocial.main import app

TEST_SECRET = "test-secret-key"


@pytest.fixture
def client(engine) -> Iterator[TestClient]:
    async def _override():
        yield LocalBackend(engine, jwt_secret=TEST_SECRET)

    app.dependency_overrides[get_backend] = _override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _sign_up(client: TestClient, username: str) -> dict:
    response = client.post(
        "/auth/sign-up",
        json={
            "email": f"{username}@example.com",
            "password": "password123",
            "confirm_password": "password123",
            "username": username,
            "display_name": username.title(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _auth(session: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {session['access_token']}"}


def _promote_to_owner(backend: LocalBackend, profile_id: str) -> None:
    async def _promote() -> None:
        rank = await (
            backend.table("ranks").insert({"name": "Owner", "color": "#DC2626", "priority": OWNER_RANK_PRIORITY}).execute()
        )
        await backend.table("profiles").update({"rank_id": rank.data[0]["id"]}).eq("id", profile_id).execute()

    asyncio.run(_promote())


def test_system_endpoints(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api").json()["service"]


def test_sign_up_sign_in_and_me(client: TestClient) -> None:
    created = _sign_up(client, "ana")
    assert created["profile"]["username"] == "ana"
    assert created["profile"]["is_verified"] is False

    signed_in = client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "password123"})
    assert signed_in.status_code == 200, signed_in.text

    me = client.get("/auth/me", headers=_auth(signed_in.json()))
    assert me.status_code == 200
    assert me.json()["profile"]["id"] == created["profile"]["id"]


def test_sign_up_rejects_mismatched_passwords(client: TestClient) -> None:
    response = client.post(
        "/auth/sign-up",
        json={
            "email": "ana@example.com",
            "password": "password123",
            "confirm_password": "password124",
            "username": "ana",
            "display_name": "Ana",
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"] == PASSWORD_MISMATCH_MESSAGE


def test_bad_credentials_and_tokens_are_rejected(client: TestClient) -> None:
    _sign_up(client, "ana")

    wrong = client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "nope-nope"})
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Invalid login credentials"

    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_empty_feed_returns_empty_message(client: TestClient) -> None:
    response = client.get("/posts/feed")

    assert response.status_code == 200
    assert response.json() == {"items": [], "empty_message": EMPTY_FEED_MESSAGE}


def test_post_like_and_comment_flow(client: TestClient) -> None:
    ana = _sign_up(client, "ana")

    created = client.post("/posts", json={"content": "hello world"}, headers=_auth(ana))
    assert created.status_code == 200, created.text
    body = created.json()
    assert body["applied"] is True
    (post,) = body["feed"]["items"]
    assert post["author"]["username"] == "ana"
    assert post["created_ago"] == "just now"

    liked = client.post(f"/posts/{post['id']}/like", json={"is_liked": False}, headers=_auth(ana)).json()
    assert liked["applied"] is True
    assert liked["feed"]["items"][0]["is_liked"] is True
    assert liked["feed"]["items"][0]["likes_count"] == 1

    stale = client.post(f"/posts/{post['id']}/like", json={"is_liked": False}, headers=_auth(ana)).json()
    assert stale == {"applied": False, "feed": None}

    commented = client.post(f"/posts/{post['id']}/comments", json={"content": "nice"}, headers=_auth(ana)).json()
    assert commented["feed"]["items"][0]["comments_count"] == 1

    comments = client.get(f"/posts/{post['id']}/comments").json()["items"]
    assert [comment["content"] for comment in comments] == ["nice"]


def test_invalid_posts_are_rejected(client: TestClient) -> None:
    ana = _sign_up(client, "ana")

    assert client.post("/posts", json={"content": "   "}, headers=_auth(ana)).status_code == 422
    assert client.post("/posts", json={"content": "x" * 501}, headers=_auth(ana)).status_code == 422
    assert client.post("/posts", json={"content": "hello"}).status_code == 401
    assert client.get("/posts/feed").json()["items"] == []


def test_admin_is_forbidden_for_non_owners(client: TestClient) -> None:
    ana = _sign_up(client, "ana")

    response = client.get("/admin", headers=_auth(ana))

    assert response.status_code == 403
    assert response.json()["detail"] == ACCESS_DENIED_MESSAGE
    assert client.get("/admin").status_code == 401


def test_owner_manages_ranks_and_flags(client: TestClient, backend: LocalBackend) -> None:
    owner = _sign_up(client, "owner")
    bob = _sign_up(client, "bob")
    _promote_to_owner(backend, owner["profile"]["id"])
    bob_id = bob["profile"]["id"]

    data = client.get("/admin", headers=_auth(owner))
    assert data.status_code == 200, data.text
    assert [user["username"] for user in data.json()["users"]] == ["bob", "owner"]

    created = client.post("/admin/ranks", json={"name": "VIP", "color": "#FFD700", "priority": 100}, headers=_auth(owner))
    assert created.json()["applied"] is True
    vip = next(rank for rank in created.json()["data"]["ranks"] if rank["name"] == "VIP")

    assigned = client.patch(f"/admin/users/{bob_id}/rank", json={"rank_id": vip["id"]}, headers=_auth(owner)).json()
    bob_row = next(user for user in assigned["data"]["users"] if user["id"] == bob_id)
    assert bob_row["rank"]["name"] == "VIP"

    verified = client.post(f"/admin/users/{bob_id}/verified", json={"current": False}, headers=_auth(owner)).json()
    assert next(user for user in verified["data"]["users"] if user["id"] == bob_id)["is_verified"] is True

    premium = client.post(f"/admin/users/{bob_id}/premium", json={"current": False}, headers=_auth(owner)).json()
    bob_row = next(user for user in premium["data"]["users"] if user["id"] == bob_id)
    assert bob_row["is_premium"] is True
    assert bob_row["premium_until"] is not None

    bad = client.post("/admin/ranks", json={"name": "  "}, headers=_auth(owner))
    assert bad.status_code == 422


def test_follow_endpoints(client: TestClient) -> None:
    ana = _sign_up(client, "ana")
    bob = _sign_up(client, "bob")
    bob_id = bob["profile"]["id"]

    followed = client.post(f"/profiles/{bob_id}/follow", headers=_auth(ana))
    assert followed.status_code == 201
    assert followed.json()["status"] == "followed"
    assert followed.json()["followers_count"] == 1

    again = client.post(f"/profiles/{bob_id}/follow", headers=_auth(ana)).json()
    assert again["status"] == "noop"

    self_follow = client.post(f"/profiles/{ana['profile']['id']}/follow", headers=_auth(ana))
    assert self_follow.status_code == 400

    stats = client.get(f"/profiles/{bob_id}/follow-stats", headers=_auth(ana)).json()
    assert stats["is_following"] is True

    unfollowed = client.delete(f"/profiles/{bob_id}/follow", headers=_auth(ana)).json()
    assert unfollowed["status"] == "unfollowed"
    assert unfollowed["followers_count"] == 0


def test_follow_unknown_profile_is_not_found(client: TestClient) -> None:
    ana = _sign_up(client, "ana")
    missing = "00000000-0000-0000-0000-000000000000"

    assert client.post(f"/profiles/{missing}/follow", headers=_auth(ana)).status_code == 404
    assert client.delete(f"/profiles/{missing}/follow", headers=_auth(ana)).status_code == 404
    assert client.get(f"/profiles/{missing}/follow-stats").status_code == 404
