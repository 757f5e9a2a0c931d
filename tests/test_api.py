"""
SocialHub Backend — HTTP API Tests
====================================

What:  End-to-end checks through the ASGI app: routing, authentication,
       the success envelope, the error body, and status codes.

What we test:
    ✅ Health endpoint reports database and breaker state
    ✅ Register → login → refresh → me
    ✅ Duplicate registration → 409, bad password → 401, no token → 401
    ✅ Follow, post, feed, like, notifications end to end
    ✅ Error body shape and request ID header
    ✅ Route ordering: /feed, /read-all are not parsed as ids
"""

import pytest


async def _register(client, email, username=None, **extra):
    body = {"email": email, "password": "s3cret-pass", **extra}
    if username:
        body["username"] = username
    response = await client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['access_token']}"}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["notifications"] == "closed"


class TestAuth:

    @pytest.mark.asyncio
    async def test_register_login_refresh_me(self, test_client):
        user, headers = await _register(test_client, "ada@example.com", "ada")
        assert user["username"] == "ada"
        assert user["email"] == "ada@example.com"
        assert user["stats"] == {"posts": 0, "followers": 0, "following": 0}

        login = await test_client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "s3cret-pass"}
        )
        assert login.status_code == 200
        refresh_token = login.json()["data"]["refresh_token"]

        refreshed = await test_client.post("/api/auth/refresh", json={"refresh_token": refresh_token})
        assert refreshed.status_code == 200
        assert refreshed.json()["data"]["token_type"] == "bearer"

        me = await test_client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["data"]["username"] == "ada"

    @pytest.mark.asyncio
    async def test_generated_username(self, test_client):
        user, _ = await _register(
            test_client, "grace@example.com", first_name="Grace", last_name="Hopper"
        )
        assert user["username"].startswith("grace_hopper_")

    @pytest.mark.asyncio
    async def test_duplicate_email_is_a_conflict(self, test_client):
        await _register(test_client, "dup@example.com", "first")

        response = await test_client.post(
            "/api/auth/register",
            json={"email": "dup@example.com", "password": "s3cret-pass", "username": "second"},
        )

        assert response.status_code == 409
        body = response.json()
        assert body["status"] == "error"
        assert body["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_missing_password(self, test_client):
        response = await test_client.post("/api/auth/register", json={"email": "x@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client):
        await _register(test_client, "bob@example.com", "bob")
        response = await test_client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "wrong-pass"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_protected_route_without_token(self, test_client):
        response = await test_client.get("/api/posts/feed")

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_error"
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_profile_update(self, test_client):
        _, headers = await _register(test_client, "eve@example.com", "eve")

        response = await test_client.put(
            "/api/auth/profile", json={"bio": "hello there"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["bio"] == "hello there"


class TestSocialFlow:

    @pytest.mark.asyncio
    async def test_follow_post_feed_like_notify(self, test_client):
        alice, alice_h = await _register(test_client, "alice@example.com", "alice")
        bob, bob_h = await _register(test_client, "bob@example.com", "bob")

        follow = await test_client.post(f"/api/users/{bob['id']}/follow", headers=alice_h)
        assert follow.status_code == 200
        again = await test_client.post(f"/api/users/{bob['id']}/follow", headers=alice_h)
        assert again.status_code == 409

        created = await test_client.post(
            "/api/posts", json={"content": "hello #world @alice"}, headers=bob_h
        )
        assert created.status_code == 201
        post_id = created.json()["data"]["id"]

        feed = await test_client.get("/api/posts/feed", headers=alice_h)
        assert feed.status_code == 200
        posts = feed.json()["data"]["posts"]
        assert [p["id"] for p in posts] == [post_id]

        like = await test_client.post(f"/api/posts/{post_id}/like", headers=alice_h)
        assert like.status_code == 200
        assert like.json()["data"] == {"post_id": post_id, "is_liked": True, "likes_count": 1}
        double = await test_client.post(f"/api/posts/{post_id}/like", headers=alice_h)
        assert double.status_code == 409

        inbox = await test_client.get("/api/notifications", headers=bob_h)
        kinds = [n["kind"] for n in inbox.json()["data"]["notifications"]]
        assert sorted(kinds) == ["FOLLOW", "LIKE"]

        mentions = await test_client.get("/api/notifications", headers=alice_h)
        assert [n["kind"] for n in mentions.json()["data"]["notifications"]] == ["MENTION"]

        read_all = await test_client.put("/api/notifications/read-all", headers=bob_h)
        assert read_all.status_code == 200
        assert read_all.json()["data"] == {"updated": 2}

        trending = await test_client.get("/api/search/trending", headers=alice_h)
        assert [t["name"] for t in trending.json()["data"]] == ["world"]

    @pytest.mark.asyncio
    async def test_profile_of_followed_account(self, test_client, make_account, auth_headers):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await test_client.post(f"/api/users/{bob.id}/follow", headers=auth_headers(alice))

        response = await test_client.get("/api/users/bob", headers=auth_headers(alice))

        assert response.status_code == 200
        profile = response.json()["data"]
        assert profile["is_following"] is True
        assert profile["stats"]["followers"] == 1

        missing = await test_client.get("/api/users/nobody", headers=auth_headers(alice))
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_self_follow_is_rejected(self, test_client):
        alice, alice_h = await _register(test_client, "solo@example.com", "solo")

        response = await test_client.post(f"/api/users/{alice['id']}/follow", headers=alice_h)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_others_notification_is_forbidden(self, test_client):
        alice, alice_h = await _register(test_client, "ann2@example.com", "ann2")
        bob, bob_h = await _register(test_client, "bob2@example.com", "bob2")
        await test_client.post(f"/api/users/{bob['id']}/follow", headers=alice_h)

        inbox = await test_client.get("/api/notifications", headers=bob_h)
        notification_id = inbox.json()["data"]["notifications"][0]["id"]

        stolen = await test_client.put(
            f"/api/notifications/{notification_id}/read", headers=alice_h
        )
        own = await test_client.put(f"/api/notifications/{notification_id}/read", headers=bob_h)

        assert stolen.status_code == 403
        assert own.status_code == 200
        assert own.json()["data"]["is_read"] is True

    @pytest.mark.asyncio
    async def test_story_view_is_idempotent(self, test_client):
        _, alice_h = await _register(test_client, "sam1@example.com", "sam1")
        _, bob_h = await _register(test_client, "sam2@example.com", "sam2")

        created = await test_client.post(
            "/api/stories", json={"media_url": "https://cdn.example.com/s.jpg"}, headers=alice_h
        )
        assert created.status_code == 201
        story_id = created.json()["data"]["id"]

        first = await test_client.post(f"/api/stories/{story_id}/view", headers=bob_h)
        second = await test_client.post(f"/api/stories/{story_id}/view", headers=bob_h)

        assert first.json()["data"]["recorded"] is True
        assert second.status_code == 200
        assert second.json()["data"] == {"story_id": story_id, "recorded": False, "views_count": 1}

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client):
        _, headers = await _register(test_client, "mal@example.com", "mal")

        response = await test_client.get("/api/posts/not-a-uuid", headers=headers)

        assert response.status_code == 422
        assert response.json()["error"] == "request_validation_error"
