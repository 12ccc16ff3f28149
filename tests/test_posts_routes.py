from __future__ import annotations

from fastapi.testclient import TestClient

from tests.fake_supabase import FakeSupabase


def _create(client: TestClient, username: str, content: str) -> dict:
    r = client.post("/api/posts", json={"username": username, "content": content})
    assert r.status_code == 200, r.text
    return r.json()


def test_feed_is_empty_list_on_empty_store(client: TestClient) -> None:
    r = client.get("/api/posts")
    assert r.status_code == 200
    assert r.json() == []


def test_create_post_returns_trimmed_content_and_server_fields(client: TestClient) -> None:
    post = _create(client, "alice", "   hello world  ")
    assert post["content"] == "hello world"
    assert post["username"] == "alice"
    assert isinstance(post["id"], int)
    assert post["created_at"]

    other = _create(client, "alice", "second")
    assert other["id"] != post["id"]
    assert other["created_at"] != post["created_at"]


def test_create_post_requires_content(client: TestClient) -> None:
    r = client.post("/api/posts", json={"username": "alice"})
    assert r.status_code == 400
    assert r.json() == {"error": "content is required"}

    r = client.post("/api/posts", json={"username": "alice", "content": "   "})
    assert r.status_code == 400
    assert r.json() == {"error": "content is required"}


def test_create_post_requires_author(client: TestClient, fake_supabase: FakeSupabase) -> None:
    r = client.post("/api/posts", json={"content": "anonymous"})
    assert r.status_code == 400
    assert r.json() == {"error": "username is required"}
    assert fake_supabase.tables["posts"] == []


def test_blank_username_is_not_an_author(client: TestClient, fake_supabase: FakeSupabase) -> None:
    r = client.post("/api/posts", json={"username": "   ", "content": "hi"})
    assert r.status_code == 400
    assert r.json() == {"error": "username is required"}
    assert fake_supabase.tables["posts"] == []


def test_padded_username_matches_registered_name(client: TestClient) -> None:
    client.post("/api/register", json={"username": " alice ", "password": "secret123"})
    post = _create(client, "  alice ", "hi")
    assert post["username"] == "alice"

    r = client.put(f"/api/posts/{post['id']}", json={"username": "alice", "content": "edited"})
    assert r.status_code == 200
    assert r.json()["content"] == "edited"


def test_malformed_json_body_is_400(client: TestClient) -> None:
    r = client.post(
        "/api/posts",
        content=b'{"username": "alice", "content": ',
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body"}


def test_feed_is_newest_first(client: TestClient) -> None:
    for text in ("one", "two", "three"):
        _create(client, "alice", text)

    posts = client.get("/api/posts").json()
    assert [p["content"] for p in posts] == ["three", "two", "one"]
    stamps = [p["created_at"] for p in posts]
    assert stamps == sorted(stamps, reverse=True)


def test_update_by_owner_changes_content_only(client: TestClient) -> None:
    post = _create(client, "alice", "draft")
    r = client.put(f"/api/posts/{post['id']}", json={"username": "alice", "content": " final "})
    assert r.status_code == 200
    body = r.json()
    assert body["content"] == "final"
    assert body["id"] == post["id"]
    assert body["created_at"] == post["created_at"]
    assert body["username"] == "alice"


def test_update_by_other_user_is_404_and_leaves_store_unchanged(client: TestClient) -> None:
    post = _create(client, "alice", "mine")
    r = client.put(f"/api/posts/{post['id']}", json={"username": "bob", "content": "hijacked"})
    assert r.status_code == 404
    assert r.json() == {"error": "Post not found or unauthorized"}
    assert client.get("/api/posts").json()[0]["content"] == "mine"


def test_update_missing_post_is_404(client: TestClient) -> None:
    r = client.put("/api/posts/999", json={"username": "alice", "content": "x"})
    assert r.status_code == 404


def test_delete_by_other_user_is_404(client: TestClient) -> None:
    post = _create(client, "alice", "keep me")
    r = client.request("DELETE", f"/api/posts/{post['id']}", json={"username": "bob"})
    assert r.status_code == 404
    assert len(client.get("/api/posts").json()) == 1


def test_delete_without_author_is_400(client: TestClient) -> None:
    post = _create(client, "alice", "keep me")
    r = client.delete(f"/api/posts/{post['id']}")
    assert r.status_code == 400
    assert r.json() == {"error": "username is required"}


def test_delete_by_owner(client: TestClient) -> None:
    post = _create(client, "alice", "bye")
    r = client.request("DELETE", f"/api/posts/{post['id']}", json={"username": "alice"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert client.get("/api/posts").json() == []

    again = client.request("DELETE", f"/api/posts/{post['id']}", json={"username": "alice"})
    assert again.status_code == 404


def test_bearer_principal_owns_posts_by_user_id(client: TestClient, fake_supabase: FakeSupabase) -> None:
    carol, carol_token = fake_supabase.auth.add_user("carol@example.com")
    _, dave_token = fake_supabase.auth.add_user("dave@example.com")

    r = client.post(
        "/api/posts",
        json={"username": "spoofed", "content": "from carol"},
        headers={"Authorization": f"Bearer {carol_token}"},
    )
    assert r.status_code == 200
    post = r.json()
    assert post["user_id"] == carol.id
    assert post["email"] == "carol@example.com"
    assert post["username"] is None

    r = client.put(
        f"/api/posts/{post['id']}",
        json={"content": "dave was here"},
        headers={"Authorization": f"Bearer {dave_token}"},
    )
    assert r.status_code == 404

    r = client.delete(f"/api/posts/{post['id']}", headers={"Authorization": f"Bearer {carol_token}"})
    assert r.status_code == 200


def test_invalid_bearer_token_is_401(client: TestClient) -> None:
    r = client.post(
        "/api/posts",
        json={"username": "alice", "content": "x"},
        headers={"Authorization": "Bearer nope"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid or expired token"}


def test_backend_error_is_500_with_upstream_message(client: TestClient, fake_supabase: FakeSupabase) -> None:
    fake_supabase.fail_next(message="connection reset by peer")
    r = client.get("/api/posts")
    assert r.status_code == 500
    assert r.json() == {"error": "connection reset by peer"}


def test_constraint_violation_is_400(client: TestClient, fake_supabase: FakeSupabase) -> None:
    fake_supabase.fail_next(code="23514", message='new row violates check constraint "posts_content_check"')
    r = client.post("/api/posts", json={"username": "alice", "content": "x"})
    assert r.status_code == 400
    assert "posts_content_check" in r.json()["error"]


def test_non_numeric_post_id_is_400(client: TestClient) -> None:
    r = client.put("/api/posts/abc", json={"username": "alice", "content": "x"})
    assert r.status_code == 400
    assert r.json()["error"].startswith("post_id")


def test_register_login_post_edit_delete_scenario(client: TestClient) -> None:
    r = client.post("/api/register", json={"username": "alice", "password": "secret123"})
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = client.post("/api/login", json={"username": "alice", "password": "secret123"})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"

    post = _create(client, "alice", "hello")
    assert post["content"] == "hello"

    feed = client.get("/api/posts").json()
    assert feed == [post]

    r = client.put(f"/api/posts/{post['id']}", json={"username": "bob", "content": "x"})
    assert r.status_code == 404
    assert client.get("/api/posts").json()[0]["content"] == "hello"

    r = client.request("DELETE", f"/api/posts/{post['id']}", json={"username": "alice"})
    assert r.status_code == 200
    assert client.get("/api/posts").json() == []
