"""
Blog Posts API — HTTP Route Tests
===================================

What:  End-to-end tests of /api/posts and /health through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport; the database is the per-test
       in-memory SQLite from conftest, seeded with two users and a category.

What we test:
    ✅ Create → 201 with camelCase body, viewCount 0, derived slug
    ✅ List newest first with author/category populated
    ✅ Slug lookup counts views
    ✅ Update, delete, comments and view increments
    ✅ 400 / 404 / 500 error bodies carry message and request_id
    ✅ Counting views leaves updatedAt alone; timestamps are UTC
"""

import logging
import uuid
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import TypeAdapter

from blogapi.services.post_service import PostService, get_post_service
from blogapi.services.store_base import PostStore

PREFIX = "/api/posts"


def post_body(seed, **overrides):
    body = {
        "title": "Hello World",
        "content": "First post body",
        "excerpt": "First post",
        "featuredImage": "https://img.example.com/hello.png",
        "author": str(seed.alice),
        "category": str(seed.news),
        "tags": ["intro"],
        "isPublished": True,
    }
    body.update(overrides)
    return body


async def create(client, seed, **overrides) -> dict:
    response = await client.post(PREFIX, json=post_body(seed, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_returns_201(self, test_client, seed):
        response = await test_client.post(PREFIX, json=post_body(seed))

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "hello-world"
        assert data["viewCount"] == 0
        assert data["comments"] == []
        assert data["author"] == str(seed.alice)
        assert data["category"] == str(seed.news)
        assert data["featuredImage"] == "https://img.example.com/hello.png"
        assert data["isPublished"] is True
        assert "createdAt" in data
        uuid.UUID(data["id"])

    @pytest.mark.asyncio
    async def test_duplicate_title_rejected(self, test_client, seed):
        await create(test_client, seed)

        response = await test_client.post(PREFIX, json=post_body(seed))

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Failed to create post"
        assert "already exists" in data["error"]
        assert data["request_id"]

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, test_client, seed):
        body = post_body(seed)
        del body["title"]

        response = await test_client.post(PREFIX, json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"
        assert "title" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_unknown_author_rejected(self, test_client, seed):
        response = await test_client.post(
            PREFIX, json=post_body(seed, author=str(uuid.uuid4()))
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Failed to create post"

    @pytest.mark.asyncio
    async def test_client_view_count_ignored(self, test_client, seed):
        data = await create(test_client, seed, viewCount=42)
        assert data["viewCount"] == 0


class TestRead:

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client, seed):
        response = await test_client.get(PREFIX)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_newest_first_populated(self, test_client, seed):
        await create(test_client, seed, title="Older")
        await create(test_client, seed, title="Newer", author=str(seed.bob))

        response = await test_client.get(PREFIX)

        assert response.status_code == 200
        posts = response.json()
        assert [p["title"] for p in posts] == ["Newer", "Older"]
        assert posts[0]["author"] == {
            "id": str(seed.bob),
            "name": "Bob",
            "email": "bob@example.com",
        }
        assert posts[0]["category"] == {"id": str(seed.news), "name": "News"}

    @pytest.mark.asyncio
    async def test_get_by_slug_counts_views(self, test_client, seed):
        await create(test_client, seed)

        first = await test_client.get(f"{PREFIX}/hello-world")
        second = await test_client.get(f"{PREFIX}/hello-world")

        assert first.status_code == 200
        assert first.json()["viewCount"] == 1
        assert second.json()["viewCount"] == 2
        assert second.json()["author"]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_get_unknown_slug(self, test_client, seed):
        response = await test_client.get(f"{PREFIX}/no-such-post")

        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"
        assert response.json()["request_id"]


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.put(
            f"{PREFIX}/{created['id']}",
            json={"content": "Edited body", "tags": ["edited"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Edited body"
        assert data["tags"] == ["edited"]
        assert data["title"] == "Hello World"

    @pytest.mark.asyncio
    async def test_update_cannot_set_view_count(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.put(
            f"{PREFIX}/{created['id']}", json={"viewCount": 1000}
        )

        assert response.status_code == 200
        assert response.json()["viewCount"] == 0

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client, seed):
        response = await test_client.put(
            f"{PREFIX}/{uuid.uuid4()}", json={"title": "Nothing here"}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"

    @pytest.mark.asyncio
    async def test_update_unknown_author(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.put(
            f"{PREFIX}/{created['id']}", json={"author": str(uuid.uuid4())}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Failed to update post"

    @pytest.mark.asyncio
    async def test_update_cannot_clear_title(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.put(f"{PREFIX}/{created['id']}", json={"title": None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client, seed):
        response = await test_client.put(f"{PREFIX}/not-a-uuid", json={"title": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_then_get(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.delete(f"{PREFIX}/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Post deleted successfully"}
        assert (await test_client.get(f"{PREFIX}/hello-world")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client, seed):
        created = await create(test_client, seed)
        await test_client.delete(f"{PREFIX}/{created['id']}")

        response = await test_client.delete(f"{PREFIX}/{created['id']}")

        assert response.status_code == 404


class TestComments:

    @pytest.mark.asyncio
    async def test_add_comments_in_order(self, test_client, seed):
        created = await create(test_client, seed)
        url = f"{PREFIX}/{created['id']}/comments"

        first = await test_client.post(url, json={"userId": str(seed.bob), "content": "First!"})
        second = await test_client.post(url, json={"userId": str(seed.alice), "content": "Thanks"})

        assert first.status_code == 201
        assert second.status_code == 201
        data = second.json()
        assert data["message"] == "Comment added"
        comments = data["post"]["comments"]
        assert [c["content"] for c in comments] == ["First!", "Thanks"]
        assert [c["userId"] for c in comments] == [str(seed.bob), str(seed.alice)]

    @pytest.mark.asyncio
    async def test_comment_on_unknown_post(self, test_client, seed):
        response = await test_client.post(
            f"{PREFIX}/{uuid.uuid4()}/comments",
            json={"userId": str(seed.bob), "content": "Hello?"},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_comment_without_content(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.post(
            f"{PREFIX}/{created['id']}/comments", json={"userId": str(seed.bob)}
        )

        assert response.status_code == 400


class TestViewCount:

    @pytest.mark.asyncio
    async def test_increment_twice(self, test_client, seed):
        created = await create(test_client, seed)
        url = f"{PREFIX}/{created['id']}/view"

        await test_client.put(url)
        response = await test_client.put(url)

        assert response.status_code == 200
        assert response.json() == {"message": "View count incremented", "views": 2}

        post = await test_client.get(f"{PREFIX}/hello-world")
        assert post.json()["viewCount"] == 3

    @pytest.mark.asyncio
    async def test_increment_unknown_post(self, test_client, seed):
        response = await test_client.put(f"{PREFIX}/{uuid.uuid4()}/view")

        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"


class TestHealthAndMiddleware:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client, seed):
        response = await test_client.get(PREFIX, headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"


class TestTimestamps:

    @pytest.mark.asyncio
    async def test_views_do_not_touch_updated_at(self, test_client, seed):
        created = await create(test_client, seed)

        await test_client.put(f"{PREFIX}/{created['id']}/view")
        fetched = await test_client.get(f"{PREFIX}/hello-world")

        assert fetched.json()["viewCount"] == 2
        assert fetched.json()["updatedAt"] == created["updatedAt"]

    @pytest.mark.asyncio
    async def test_update_moves_updated_at(self, test_client, seed):
        created = await create(test_client, seed)

        response = await test_client.put(f"{PREFIX}/{created['id']}", json={"content": "New"})

        parse = TypeAdapter(datetime).validate_python
        assert parse(response.json()["updatedAt"]) > parse(created["updatedAt"])

    @pytest.mark.asyncio
    async def test_timestamps_carry_utc_offset(self, test_client, seed):
        created = await create(test_client, seed)
        await test_client.post(
            f"{PREFIX}/{created['id']}/comments",
            json={"userId": str(seed.bob), "content": "Hi"},
        )

        post = (await test_client.get(f"{PREFIX}/hello-world")).json()

        parse = TypeAdapter(datetime).validate_python
        for value in (post["createdAt"], post["updatedAt"], post["comments"][0]["createdAt"]):
            assert parse(value).utcoffset() == timedelta(0)


@pytest_asyncio.fixture
async def broken_store_client():
    """Client whose PostService sits on a store where every call fails."""
    from blogapi.main import create_app

    app = create_app()
    store = AsyncMock(spec=PostStore)
    for method in ("list_all", "find_by_slug", "delete", "increment_view_count"):
        getattr(store, method).side_effect = RuntimeError("connection reset")
    app.dependency_overrides[get_post_service] = lambda: PostService(store)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestServerErrors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, message",
        [
            ("GET", PREFIX, "Error fetching posts"),
            ("GET", f"{PREFIX}/hello-world", "Error fetching post"),
            ("DELETE", f"{PREFIX}/{uuid.uuid4()}", "Error deleting post"),
            ("PUT", f"{PREFIX}/{uuid.uuid4()}/view", "Error incrementing view count"),
        ],
    )
    async def test_store_failure_is_500(self, broken_store_client, method, path, message):
        response = await broken_store_client.request(method, path)

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == message
        assert data["request_id"] == response.headers["X-Request-ID"]
        assert "error" not in data
        assert "connection reset" not in response.text

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_500(self):
        from blogapi.main import create_app

        app = create_app()
        service = AsyncMock(spec=PostService)
        service.list_posts.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_post_service] = lambda: service

        # The fallback handler answers, then Starlette re-raises to the server
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(PREFIX)

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "An unexpected error occurred. Please try again later."
        assert "request_id" in data
        assert "boom" not in response.text


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_not_found_logged_as_warning(self, test_client, seed, caplog):
        caplog.set_level(logging.INFO, logger="blogapi.access")

        await test_client.get(f"{PREFIX}/missing", headers={"X-Request-ID": "rid42"})

        records = [r for r in caplog.records if r.name == "blogapi.access"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert f"GET {PREFIX}/missing 404" in records[0].getMessage()
        assert records[0].request_id == "rid42"

    @pytest.mark.asyncio
    async def test_health_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="blogapi.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "blogapi.access"]
