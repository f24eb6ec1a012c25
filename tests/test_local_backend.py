"""Behaviour of the SQLAlchemy-backed stand-in for the hosted backend."""
from __future__ import annotations

import asyncio

import pytest

from ranksocial.clients import AuthApiError, BackendError
from ranksocial.clients.select import parse_select


def _run(coro):
    return asyncio.run(coro)


def test_parse_select_reads_aliases_hints_and_nesting() -> None:
    spec = parse_select("*, author:profiles!posts_author_id_fkey(*, rank:ranks(*))")

    assert spec.include_all
    (author,) = spec.embeds
    assert (author.alias, author.table, author.hint) == ("author", "profiles", "posts_author_id_fkey")
    (rank,) = author.select.embeds
    assert (rank.alias, rank.table, rank.hint) == ("rank", "ranks", None)


@pytest.mark.parametrize("expression", ["*, author:profiles(*", "*, rank:ranks*)", "*, :(*)"])
def test_parse_select_rejects_malformed_expressions(expression: str) -> None:
    with pytest.raises(ValueError):
        parse_select(expression)


def test_select_embeds_author_and_rank(backend, profile_factory) -> None:
    author = profile_factory("ana", rank_priority=10)
    _run(backend.table("posts").insert({"author_id": author["id"], "content": "hello"}).execute())

    response = _run(
        backend.table("posts").select("*, author:profiles!posts_author_id_fkey(*, rank:ranks(*))").execute()
    )

    (post,) = response.data
    assert post["author"]["username"] == "ana"
    assert post["author"]["rank"]["priority"] == 10
    assert post["created_at"].endswith("+00:00")


def test_embed_is_null_when_foreign_key_is_unset(backend, profile_factory) -> None:
    profile_factory("ana")

    response = _run(backend.table("profiles").select("*, rank:ranks(*)").maybe_single().execute())

    assert response.data["rank"] is None


def test_like_and_comment_writes_maintain_post_counters(backend, profile_factory) -> None:
    author = profile_factory("ana")
    post = _run(backend.table("posts").insert({"author_id": author["id"], "content": "hi"}).execute()).data[0]

    _run(backend.table("likes").insert({"post_id": post["id"], "user_id": author["id"]}).execute())
    _run(
        backend.table("comments")
        .insert({"post_id": post["id"], "author_id": author["id"], "content": "first"})
        .execute()
    )
    counts = _run(backend.table("posts").select("likes_count, comments_count").maybe_single().execute()).data
    assert counts == {"likes_count": 1, "comments_count": 1}

    _run(backend.table("likes").delete().eq("post_id", post["id"]).eq("user_id", author["id"]).execute())
    counts = _run(backend.table("posts").select("likes_count").maybe_single().execute()).data
    assert counts == {"likes_count": 0}


def test_duplicate_like_reports_unique_violation(backend, profile_factory) -> None:
    author = profile_factory("ana")
    post = _run(backend.table("posts").insert({"author_id": author["id"], "content": "hi"}).execute()).data[0]
    like = {"post_id": post["id"], "user_id": author["id"]}
    _run(backend.table("likes").insert(like).execute())

    with pytest.raises(BackendError) as excinfo:
        _run(backend.table("likes").insert(like).execute())

    assert excinfo.value.code == "23505"
    counts = _run(backend.table("posts").select("likes_count").maybe_single().execute()).data
    assert counts == {"likes_count": 1}


def test_like_on_missing_post_reports_foreign_key_violation(backend, profile_factory) -> None:
    author = profile_factory("ana")

    with pytest.raises(BackendError) as excinfo:
        _run(backend.table("likes").insert({"post_id": "missing", "user_id": author["id"]}).execute())

    assert excinfo.value.code == "23503"


def test_unknown_table_and_column_are_rejected(backend) -> None:
    with pytest.raises(BackendError) as missing_table:
        _run(backend.table("nope").select("*").execute())
    with pytest.raises(BackendError) as missing_column:
        _run(backend.table("posts").select("*").eq("nope", 1).execute())
    with pytest.raises(BackendError):
        _run(backend.table("auth_users").select("*").execute())

    assert missing_table.value.code == "PGRST205"
    assert missing_column.value.code == "PGRST204"


def test_update_returns_changed_rows(backend, profile_factory) -> None:
    profile = profile_factory("ana")

    response = _run(backend.table("profiles").update({"is_verified": True}).eq("id", profile["id"]).execute())

    (row,) = response.data
    assert row["is_verified"] is True


def test_password_sign_in_issues_token_accepted_by_get_user(backend, profile_factory) -> None:
    profile_factory("ana")

    session = _run(backend.auth.sign_in_with_password("ANA@example.com", "password123"))
    user = _run(backend.auth.get_user(session.access_token))

    assert user.email == "ana@example.com"


def test_auth_rejects_bad_credentials_tokens_and_duplicates(backend, profile_factory) -> None:
    profile_factory("ana")

    with pytest.raises(AuthApiError, match="Invalid login credentials"):
        _run(backend.auth.sign_in_with_password("ana@example.com", "wrong-password"))
    with pytest.raises(AuthApiError, match="Invalid JWT"):
        _run(backend.auth.get_user("not-a-token"))
    with pytest.raises(AuthApiError, match="User already registered"):
        _run(backend.auth.sign_up("ana@example.com", "password123"))


def test_backend_calls_leave_the_event_loop_running(backend) -> None:
    async def scenario() -> tuple[int, int]:
        ticks = 0
        stop = asyncio.Event()

        async def _ticker() -> None:
            nonlocal ticks
            while not stop.is_set():
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.create_task(_ticker())
        await asyncio.sleep(0)

        before = ticks
        await backend.auth.sign_up("ana@example.com", "password123")
        during_sign_up = ticks - before

        before = ticks
        await backend.table("ranks").insert({"name": "VIP"}).execute()
        during_query = ticks - before

        stop.set()
        await task
        return during_sign_up, during_query

    during_sign_up, during_query = _run(scenario())

    assert during_sign_up > 0
    assert during_query > 0


def test_exact_count_ignores_limit_and_honours_filters(backend, profile_factory) -> None:
    ana = profile_factory("ana")
    bob = profile_factory("bob")
    for content in ("one", "two", "three"):
        _run(backend.table("posts").insert({"author_id": ana["id"], "content": content}).execute())
    _run(backend.table("posts").insert({"author_id": bob["id"], "content": "other"}).execute())

    counted = _run(backend.table("posts").select("id", count="exact").eq("author_id", ana["id"]).limit(1).execute())
    head_only = _run(backend.table("posts").select("id", count="exact", head=True).execute())

    assert counted.count == 3
    assert len(counted.data) == 1
    assert head_only.count == 4
    assert head_only.data is None
