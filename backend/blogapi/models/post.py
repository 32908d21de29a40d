"""
Blog Posts API — Post & Comment SQLAlchemy Models
===================================================

What:  ORM models for the `posts` and `comments` tables.
How:   Inherit from the shared DeclarativeBase; Alembic reads them for migrations.
Who:   Used by SQLAlchemyPostStore for every CRUD operation.

Table Design:
    - UUID primary keys generated client-side (works on PostgreSQL and SQLite)
    - slug: unique, looked up by GET /{slug}
    - author_id / category_id: weak references. Deleting a user or category
      sets them to NULL; writing an unknown id is rejected by the store.
    - tags: JSON array (JSONB on PostgreSQL)
    - view_count: only ever incremented by the store
    - comments: child rows ordered by `position`, deleted with their post

    Index on created_at DESC backs the newest-first listing.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogapi.database import Base
from blogapi.models.category import Category
from blogapi.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post.

    Lifecycle:
        1. Created with view_count = 0 and no comments
        2. Fields replaced by updates; view_count incremented by reads of
           GET /{slug} and PUT /{id}/view; comments appended
        3. Deleted outright together with its comments (no soft delete)

    Relationships load with `selectin` so a single query returns the post
    with its author, category and comments already populated.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    featured_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    tags: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )

    is_published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    view_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    author: Mapped[Optional[User]] = relationship(lazy="selectin")

    category: Mapped[Optional[Category]] = relationship(lazy="selectin")

    # Appending sets `position` to the new index, so comments keep insertion order
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post",
        order_by="Comment.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug='{self.slug}', views={self.view_count})>"


class Comment(Base):
    """A comment on a post. Append-only: never edited or removed on its own."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    position: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    post: Mapped[Post] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, post_id={self.post_id}, position={self.position})>"
