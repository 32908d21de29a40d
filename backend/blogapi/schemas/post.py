"""
Blog Posts API — Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the JSON contract of the posts API.
How:   FastAPI validates request bodies against the *Create/*Update models,
       serializes responses through the *Response models, and generates the
       OpenAPI document from both.

JSON keys are camelCase (featuredImage, isPublished, viewCount, createdAt);
Python attributes stay snake_case. `populate_by_name` lets services build
responses with the Python names.

Two post representations:
    PostResponse           author/category as identifiers (write endpoints)
    PopulatedPostResponse  author as {id, name, email}, category as {id, name}
                           (list and slug lookup)
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(CamelModel):
    """
    Body of POST /. The slug is derived from the title by the store.
    """
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    featured_image: Optional[str] = Field(default=None, max_length=1024)
    excerpt: Optional[str] = None
    author: uuid.UUID = Field(description="ID of the authoring user")
    category: Optional[uuid.UUID] = Field(default=None, description="ID of the category")
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False


class PostUpdate(CamelModel):
    """
    Body of PUT /{id}. Only the keys present in the body are applied.

    viewCount and comments are not accepted here: they change only through
    their dedicated endpoints. Unknown keys are ignored.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, max_length=255, pattern=SLUG_PATTERN)
    featured_image: Optional[str] = Field(default=None, max_length=1024)
    excerpt: Optional[str] = None
    author: Optional[uuid.UUID] = None
    category: Optional[uuid.UUID] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None

    @field_validator("title", "content", "slug", "author", "tags", "is_published", mode="before")
    @classmethod
    def reject_null(cls, v):
        """Required post fields may be omitted from an update but not cleared."""
        if v is None:
            raise ValueError("field is required and cannot be null")
        return v


class CommentCreate(CamelModel):
    """Body of POST /{id}/comments."""
    user_id: uuid.UUID
    content: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorSummary(CamelModel):
    id: uuid.UUID
    name: str
    email: str


class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str


class CommentResponse(CamelModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    content: str
    created_at: UtcDatetime


class _PostFields(CamelModel):
    id: uuid.UUID
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    view_count: int = 0
    comments: List[CommentResponse] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: UtcDatetime


class PostResponse(_PostFields):
    """Stored representation returned by create, update and add-comment."""
    author: Optional[uuid.UUID] = None
    category: Optional[uuid.UUID] = None


class PopulatedPostResponse(_PostFields):
    """Representation with author and category resolved, for reads."""
    author: Optional[AuthorSummary] = None
    category: Optional[CategorySummary] = None


class MessageResponse(BaseModel):
    message: str


class CommentAddedResponse(BaseModel):
    message: str = "Comment added"
    post: PostResponse


class ViewCountResponse(BaseModel):
    message: str = "View count incremented"
    views: int


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body used by every global exception handler.

    Example:
        {
            "message": "Failed to update post",
            "error": "Author '0b7c…' does not exist",
            "request_id": "1a2b3c4d"
        }

    `error` is present on validation failures only.
    """
    message: str = Field(description="Human-readable error description")
    error: Optional[str] = Field(default=None, description="Underlying validation error")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
