"""
Blog Posts API — Abstract Post Store Interface
================================================

What:  Abstract base class defining the contract of the post persistence layer.
How:   Concrete stores inherit from PostStore and implement every method.
Who:   Called by PostService; implemented by SQLAlchemyPostStore and by the
       in-memory store used in the service tests.

Contract:
    - Lookups return None when nothing matches (never raise for "missing")
    - Writes raise ValidationError when the data is rejected (missing
      required field, duplicate slug, unknown author/category/user)
    - Any other exception means the store itself failed
    - Posts returned by list_all/find_by_slug have author and category
      resolved; every returned post has its comments in order
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from blogapi.models.post import Post


class PostStore(ABC):
    """Persistence collaborator for posts and their comments."""

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Post:
        """
        Persist a new post.

        Args:
            data: Column values keyed by model attribute name (title, content,
                  excerpt, featured_image, author_id, category_id, tags,
                  is_published). The slug is derived from the title unless
                  `slug` is given.

        Returns:
            The stored post with view_count 0 and no comments.

        Raises:
            ValidationError: required field missing, slug taken, or a
                referenced user/category does not exist.
        """
        ...

    @abstractmethod
    async def list_all(self) -> List[Post]:
        """All posts, newest first (created_at descending)."""
        ...

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Post]:
        ...

    @abstractmethod
    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        ...

    @abstractmethod
    async def update(self, post_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[Post]:
        """
        Replace the given fields of a post, re-running validation.

        Returns:
            The updated post, or None if no post has this id.

        Raises:
            ValidationError: a field is invalid or the new slug is taken.
        """
        ...

    @abstractmethod
    async def delete(self, post_id: uuid.UUID) -> bool:
        """Remove a post and its comments. False if it did not exist."""
        ...

    @abstractmethod
    async def increment_view_count(self, post_id: uuid.UUID) -> Optional[int]:
        """
        Add one to the post's view count as a single atomic update.

        Returns:
            The view count after the increment, or None if the post is gone.
        """
        ...

    @abstractmethod
    async def add_comment(
        self, post_id: uuid.UUID, user_id: uuid.UUID, content: str
    ) -> Optional[Post]:
        """
        Append a comment to the end of the post's comment list.

        Returns:
            The updated post, or None if no post has this id.

        Raises:
            ValidationError: empty content or unknown user.
        """
        ...
