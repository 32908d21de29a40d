"""
Blog Posts API — Post Service (Resource Handler)
==================================================

What:  Translates post operations into PostStore calls and store results into
       response models or application exceptions.
How:   Constructed with an injected PostStore. Holds no other state, so a new
       instance per request is cheap and tests can pass in any store.
Who:   Called by the route handlers in routes/posts.py.

Error mapping:
    Operation          store rejects / fails         missing post
    ────────────────── ──────────────────────────── ─────────────
    create_post        ValidationError (400)          -
    list_posts         DatabaseError (500)            -
    get_post_by_slug   DatabaseError (500)            NotFoundError
    update_post        ValidationError (400)          NotFoundError
    delete_post        DatabaseError (500)            NotFoundError
    add_comment        ValidationError (400)          NotFoundError
    increment_views    DatabaseError (500)            NotFoundError

    Every failure is logged here before it propagates to the global
    exception handlers. Nothing is retried.
"""

import logging
import uuid
from typing import Any, Dict, List

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.database import get_db_session
from blogapi.exceptions import DatabaseError, NotFoundError, ValidationError
from blogapi.models.post import Post
from blogapi.schemas.post import (
    AuthorSummary,
    CategorySummary,
    CommentAddedResponse,
    CommentCreate,
    CommentResponse,
    MessageResponse,
    PopulatedPostResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    ViewCountResponse,
)
from blogapi.services.post_store import SQLAlchemyPostStore
from blogapi.services.store_base import PostStore

logger = logging.getLogger(__name__)

# Request field name → store column name
_REFERENCE_FIELDS = {"author": "author_id", "category": "category_id"}


def _to_store_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    return {_REFERENCE_FIELDS.get(key, key): value for key, value in values.items()}


def _common_fields(post: Post) -> Dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "content": post.content,
        "excerpt": post.excerpt,
        "featured_image": post.featured_image,
        "tags": list(post.tags or []),
        "is_published": post.is_published,
        "view_count": post.view_count,
        "comments": [CommentResponse.model_validate(c) for c in post.comments],
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def to_post_response(post: Post) -> PostResponse:
    """Stored representation: author and category as identifiers."""
    return PostResponse(
        **_common_fields(post),
        author=post.author_id,
        category=post.category_id,
    )


def to_populated_response(post: Post) -> PopulatedPostResponse:
    """Read representation: author → {id, name, email}, category → {id, name}."""
    author = post.author
    category = post.category
    return PopulatedPostResponse(
        **_common_fields(post),
        author=(
            AuthorSummary(id=author.id, name=author.name, email=author.email)
            if author is not None else None
        ),
        category=(
            CategorySummary(id=category.id, name=category.name)
            if category is not None else None
        ),
    )


class PostService:
    """
    Handler for every post operation exposed over HTTP.

    Responsibilities:
        - create_post / update_post / delete_post: CRUD pass-through
        - list_posts / get_post_by_slug: populated reads
        - add_comment / increment_views: domain operations on one post

    get_post_by_slug performs two store calls: fetch, then increment the
    view count. The returned post carries the count after the increment.
    """

    def __init__(self, store: PostStore):
        self.store = store

    async def create_post(self, payload: PostCreate) -> PostResponse:
        data = _to_store_fields(payload.model_dump())
        try:
            post = await self.store.create(data)
        except ValidationError as e:
            logger.warning("Post creation rejected: %s", e.error)
            raise e.with_message("Failed to create post")
        except Exception as e:
            logger.error("Failed to create post: %s", str(e), exc_info=True)
            raise ValidationError(
                message="Failed to create post",
                error=str(e),
                context={"error_type": type(e).__name__},
            )

        logger.info("Post created: %s (slug=%s)", post.id, post.slug)
        return to_post_response(post)

    async def list_posts(self) -> List[PopulatedPostResponse]:
        try:
            posts = await self.store.list_all()
        except Exception as e:
            logger.error("Error fetching posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching posts",
                context={"error_type": type(e).__name__},
            )
        return [to_populated_response(post) for post in posts]

    async def get_post_by_slug(self, slug: str) -> PopulatedPostResponse:
        try:
            post = await self.store.find_by_slug(slug)
            if post is None:
                raise NotFoundError(resource="Post", resource_id=slug)

            response = to_populated_response(post)
            views = await self.store.increment_view_count(post.id)
            if views is None:
                # Deleted between the lookup and the increment
                raise NotFoundError(resource="Post", resource_id=slug)

        except NotFoundError:
            logger.info("Post not found for slug '%s'", slug)
            raise
        except Exception as e:
            logger.error("Error fetching post '%s': %s", slug, str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching post",
                context={"slug": slug, "error_type": type(e).__name__},
            )

        return response.model_copy(update={"view_count": views})

    async def update_post(self, post_id: uuid.UUID, payload: PostUpdate) -> PostResponse:
        changes = _to_store_fields(payload.model_dump(exclude_unset=True))
        try:
            post = await self.store.update(post_id, changes)
        except ValidationError as e:
            logger.warning("Update of post %s rejected: %s", post_id, e.error)
            raise e.with_message("Failed to update post")
        except Exception as e:
            logger.error("Failed to update post %s: %s", post_id, str(e), exc_info=True)
            raise ValidationError(
                message="Failed to update post",
                error=str(e),
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            )

        if post is None:
            logger.info("Update of missing post %s", post_id)
            raise NotFoundError(resource="Post", resource_id=str(post_id))

        logger.info("Post updated: %s (fields=%s)", post_id, sorted(changes))
        return to_post_response(post)

    async def delete_post(self, post_id: uuid.UUID) -> MessageResponse:
        try:
            deleted = await self.store.delete(post_id)
        except Exception as e:
            logger.error("Error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Error deleting post",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            )

        if not deleted:
            logger.info("Delete of missing post %s", post_id)
            raise NotFoundError(resource="Post", resource_id=str(post_id))

        logger.info("Post deleted: %s", post_id)
        return MessageResponse(message="Post deleted successfully")

    async def add_comment(self, post_id: uuid.UUID, payload: CommentCreate) -> CommentAddedResponse:
        try:
            post = await self.store.add_comment(post_id, payload.user_id, payload.content)
        except ValidationError as e:
            logger.warning("Comment on post %s rejected: %s", post_id, e.error)
            raise e.with_message("Failed to add comment")
        except Exception as e:
            logger.error("Failed to add comment to %s: %s", post_id, str(e), exc_info=True)
            raise ValidationError(
                message="Failed to add comment",
                error=str(e),
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            )

        if post is None:
            logger.info("Comment on missing post %s", post_id)
            raise NotFoundError(resource="Post", resource_id=str(post_id))

        logger.info("Comment added to post %s (%d total)", post_id, len(post.comments))
        return CommentAddedResponse(message="Comment added", post=to_post_response(post))

    async def increment_views(self, post_id: uuid.UUID) -> ViewCountResponse:
        try:
            views = await self.store.increment_view_count(post_id)
        except Exception as e:
            logger.error("Error incrementing view count of %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Error incrementing view count",
                context={"post_id": str(post_id), "error_type": type(e).__name__},
            )

        if views is None:
            raise NotFoundError(resource="Post", resource_id=str(post_id))

        return ViewCountResponse(message="View count incremented", views=views)


def get_post_service(db: AsyncSession = Depends(get_db_session)) -> PostService:
    """FastAPI dependency: a PostService over the request's database session."""
    return PostService(SQLAlchemyPostStore(db))
