"""
Blog Posts API — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    engine / session_factory / db_session
        Fresh in-memory SQLite database (aiosqlite) per test, schema created
        from the ORM metadata.
    seed
        Two users and one category committed to that database.
    test_client
        HTTPX AsyncClient talking to a fresh app whose get_db_session
        dependency is bound to the test database.
    memory_store
        InMemoryPostStore: a PostStore kept in plain dicts, for PostService
        tests that should not touch SQLAlchemy at all.
"""

import os

# Must be set before anything imports blogapi.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import blogapi.models  # noqa: F401
from blogapi.database import Base, enable_sqlite_foreign_keys, get_db_session
from blogapi.exceptions import ValidationError
from blogapi.models import Category, Comment, Post, User
from blogapi.services.slugs import slugify
from blogapi.services.store_base import PostStore


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@dataclass
class Seed:
    alice: uuid.UUID
    bob: uuid.UUID
    news: uuid.UUID


@pytest_asyncio.fixture
async def seed(session_factory) -> Seed:
    """Users and a category that posts can reference."""
    alice = User(name="Alice", email="alice@example.com")
    bob = User(name="Bob", email="bob@example.com")
    news = Category(name="News")
    async with session_factory() as session:
        session.add_all([alice, bob, news])
        await session.commit()
    return Seed(alice=alice.id, bob=bob.id, news=news.id)


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient routed straight into a fresh FastAPI app.

    Each request gets its own session from the test database, committed on
    success and rolled back on error, like get_db_session does.
    """
    from blogapi.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Store
# ══════════════════════════════════════════════════════════════════════════

class InMemoryPostStore(PostStore):
    """
    PostStore over dicts of transient ORM objects.

    created_at advances one second per post so ordering is deterministic.
    """

    def __init__(self):
        self.posts: Dict[uuid.UUID, Post] = {}
        self.users: Dict[uuid.UUID, User] = {}
        self.categories: Dict[uuid.UUID, Category] = {}
        self._now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def add_user(self, name: str, email: str) -> User:
        user = User(id=uuid.uuid4(), name=name, email=email, created_at=self._tick())
        self.users[user.id] = user
        return user

    def add_category(self, name: str) -> Category:
        category = Category(id=uuid.uuid4(), name=name, created_at=self._tick())
        self.categories[category.id] = category
        return category

    def _check(self, values: Dict[str, Any], exclude: Optional[uuid.UUID] = None) -> None:
        slug = values.get("slug")
        if slug is not None and any(
            p.slug == slug and p.id != exclude for p in self.posts.values()
        ):
            raise ValidationError(
                message="Post validation failed",
                error=f"A post with slug '{slug}' already exists",
                field="slug",
            )
        if "author_id" in values and values["author_id"] not in self.users:
            raise ValidationError(
                message="Author not found",
                error=f"Author '{values['author_id']}' does not exist",
                field="author",
            )
        category_id = values.get("category_id")
        if category_id is not None and category_id not in self.categories:
            raise ValidationError(
                message="Category not found",
                error=f"Category '{category_id}' does not exist",
                field="category",
            )

    def _link(self, post: Post) -> None:
        post.author = self.users.get(post.author_id)
        post.category = self.categories.get(post.category_id)

    async def create(self, data: Dict[str, Any]) -> Post:
        values = dict(data, slug=slugify(data["title"]))
        self._check(values)
        created = self._tick()
        post = Post(
            id=uuid.uuid4(),
            slug=values["slug"],
            title=values["title"],
            content=values["content"],
            excerpt=values.get("excerpt"),
            featured_image=values.get("featured_image"),
            author_id=values["author_id"],
            category_id=values.get("category_id"),
            tags=list(values.get("tags") or []),
            is_published=values.get("is_published", False),
            view_count=0,
            created_at=created,
            updated_at=created,
            comments=[],
        )
        self._link(post)
        self.posts[post.id] = post
        return post

    async def list_all(self) -> List[Post]:
        return sorted(self.posts.values(), key=lambda p: p.created_at, reverse=True)

    async def find_by_slug(self, slug: str) -> Optional[Post]:
        return next((p for p in self.posts.values() if p.slug == slug), None)

    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        return self.posts.get(post_id)

    async def update(self, post_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[Post]:
        post = self.posts.get(post_id)
        if post is None:
            return None
        self._check(changes, exclude=post_id)
        for field, value in changes.items():
            setattr(post, field, value)
        post.updated_at = self._tick()
        self._link(post)
        return post

    async def delete(self, post_id: uuid.UUID) -> bool:
        return self.posts.pop(post_id, None) is not None

    async def increment_view_count(self, post_id: uuid.UUID) -> Optional[int]:
        post = self.posts.get(post_id)
        if post is None:
            return None
        post.view_count += 1
        return post.view_count

    async def add_comment(
        self, post_id: uuid.UUID, user_id: uuid.UUID, content: str
    ) -> Optional[Post]:
        post = self.posts.get(post_id)
        if post is None:
            return None
        if user_id not in self.users:
            raise ValidationError(
                message="User not found",
                error=f"User '{user_id}' does not exist",
                field="userId",
            )
        post.comments.append(
            Comment(id=uuid.uuid4(), user_id=user_id, content=content, created_at=self._tick())
        )
        return post


@pytest.fixture
def memory_store():
    return InMemoryPostStore()
