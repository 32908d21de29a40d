"""
Blog Posts API — SQLAlchemy Post Store
========================================

What:  PostStore implementation over an async SQLAlchemy session.
How:   One store is built per request around that request's session (see
       post_service.get_post_service). Every write is flushed inside the
       call so constraint violations surface here, not at commit time.
Who:   Used by PostService in the running application and by the store tests.

Validation performed here:
    - title / content / author are required on create
    - slug is derived from the title and must be unique
    - author, category and comment user must reference existing rows

Transactions:
    The session is committed by get_db_session() after the request.
    On an IntegrityError the store rolls the session back before raising,
    leaving it usable for the error response.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.database import Base
from blogapi.exceptions import ValidationError
from blogapi.models.category import Category
from blogapi.models.post import Comment, Post
from blogapi.models.user import User
from blogapi.services.slugs import slugify
from blogapi.services.store_base import PostStore

logger = logging.getLogger(__name__)

# Columns a client may set through create/update
WRITABLE_FIELDS = frozenset({
    "title",
    "slug",
    "content",
    "excerpt",
    "featured_image",
    "author_id",
    "category_id",
    "tags",
    "is_published",
})

REQUIRED_FIELDS = ("title", "content", "author_id")

_FIELD_LABELS = {
    "author_id": "author",
    "category_id": "category",
    "featured_image": "featuredImage",
    "is_published": "isPublished",
}


def _label(field: str) -> str:
    return _FIELD_LABELS.get(field, field)


class SQLAlchemyPostStore(PostStore):
    """Post store backed by the relational schema in blogapi.models."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_all(self) -> List[Post]:
        result = await self.session.execute(
            select(Post).order_by(Post.created_at.desc())
        )
        return list(result.scalars().all())

    async def find_by_slug(self, slug: str) -> Optional[Post]:
        return await self._get_one(Post.slug == slug)

    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        return await self._get_one(Post.id == post_id)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, data: Dict[str, Any]) -> Post:
        values = self._writable(data)
        for field in REQUIRED_FIELDS:
            if self._is_blank(values.get(field)):
                raise ValidationError(
                    message="Post validation failed",
                    error=f"'{_label(field)}' is required",
                    field=_label(field),
                )

        slug = values.pop("slug", None) or slugify(values["title"])
        if not slug:
            raise ValidationError(
                message="Post validation failed",
                error="Title must contain at least one letter or digit",
                field="title",
            )
        await self._ensure_slug_available(slug)
        await self._ensure_references(values)

        post = Post(
            slug=slug,
            title=values["title"],
            content=values["content"],
            excerpt=values.get("excerpt"),
            featured_image=values.get("featured_image"),
            author_id=values["author_id"],
            category_id=values.get("category_id"),
            tags=list(values.get("tags") or []),
            is_published=bool(values.get("is_published", False)),
            view_count=0,
            comments=[],
        )
        self.session.add(post)
        await self._flush()
        logger.debug("Inserted post %s (slug=%s)", post.id, slug)
        return await self._reload(post.id)

    async def update(self, post_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[Post]:
        post = await self.find_by_id(post_id)
        if post is None:
            return None

        values = self._writable(changes)
        for field in ("title", "content", "slug", "author_id"):
            if field in values and self._is_blank(values[field]):
                raise ValidationError(
                    message="Post validation failed",
                    error=f"'{_label(field)}' cannot be empty",
                    field=_label(field),
                )
        if "slug" in values and values["slug"] != post.slug:
            await self._ensure_slug_available(values["slug"])
        await self._ensure_references(values)

        if "tags" in values:
            values["tags"] = list(values["tags"] or [])
        for field, value in values.items():
            setattr(post, field, value)

        await self._flush()
        return await self._reload(post.id)

    async def delete(self, post_id: uuid.UUID) -> bool:
        post = await self.find_by_id(post_id)
        if post is None:
            return False
        # ORM delete so the comments cascade on every backend
        await self.session.delete(post)
        await self.session.flush()
        return True

    async def increment_view_count(self, post_id: uuid.UUID) -> Optional[int]:
        await self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            # updated_at tracks edits made through update() only
            .values(view_count=Post.view_count + 1, updated_at=Post.updated_at)
        )
        return await self.session.scalar(
            select(Post.view_count).where(Post.id == post_id)
        )

    async def add_comment(
        self, post_id: uuid.UUID, user_id: uuid.UUID, content: str
    ) -> Optional[Post]:
        post = await self.find_by_id(post_id)
        if post is None:
            return None

        if user_id is None:
            raise ValidationError(
                message="Comment validation failed",
                error="'userId' is required",
                field="userId",
            )
        if self._is_blank(content):
            raise ValidationError(
                message="Comment validation failed",
                error="'content' is required",
                field="content",
            )
        await self._require_row(User, user_id, "User", "userId")

        post.comments.append(Comment(user_id=user_id, content=content))
        await self._flush()
        return await self._reload(post.id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_one(self, condition) -> Optional[Post]:
        result = await self.session.execute(select(Post).where(condition))
        return result.scalar_one_or_none()

    async def _reload(self, post_id: uuid.UUID) -> Post:
        # populate_existing refreshes the identity-mapped instance, including
        # relationships that were never loaded on a freshly inserted post
        result = await self.session.execute(
            select(Post)
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Integrity error on post write: %s", e.orig)
            raise ValidationError(
                message="Post rejected by the database",
                error=str(e.orig),
                context={"error_type": type(e.orig).__name__},
            ) from e

    async def _ensure_slug_available(self, slug: str) -> None:
        taken = await self.session.scalar(select(Post.id).where(Post.slug == slug))
        if taken is not None:
            raise ValidationError(
                message="Post validation failed",
                error=f"A post with slug '{slug}' already exists",
                field="slug",
            )

    async def _ensure_references(self, values: Dict[str, Any]) -> None:
        if values.get("author_id") is not None:
            await self._require_row(User, values["author_id"], "Author", "author")
        if values.get("category_id") is not None:
            await self._require_row(Category, values["category_id"], "Category", "category")

    async def _require_row(
        self, model: Type[Base], ident: uuid.UUID, label: str, field: str
    ) -> None:
        if await self.session.get(model, ident) is None:
            raise ValidationError(
                message=f"{label} not found",
                error=f"{label} '{ident}' does not exist",
                field=field,
            )

    @staticmethod
    def _writable(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k in WRITABLE_FIELDS}

    @staticmethod
    def _is_blank(value: Any) -> bool:
        return value is None or (isinstance(value, str) and not value.strip())
