"""
Blog Posts API — Post Route Handlers
======================================

What:  HTTP surface of the posts resource.
How:   Each handler receives a PostService through Depends(get_post_service),
       delegates to it, and returns its response model.
Who:   Called by the blog frontend.

Path parameters:
    {slug}     any string; looked up against Post.slug
    {post_id}  UUID; a malformed value fails request validation (400)
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends

from blogapi.config import settings
from blogapi.schemas.post import (
    CommentAddedResponse,
    CommentCreate,
    ErrorResponse,
    MessageResponse,
    PopulatedPostResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    ViewCountResponse,
)
from blogapi.services.post_service import PostService, get_post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Posts"])

_NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}
_BAD_REQUEST = {400: {"description": "Invalid or rejected fields", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses={**_BAD_REQUEST},
    summary="Create a post",
    description=(
        "Creates a post from title, content, featuredImage, excerpt, author, "
        "category, tags and isPublished. The slug is derived from the title "
        "and must be unique."
    ),
)
async def create_post(
    payload: PostCreate,
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await service.create_post(payload)


@router.get(
    "",
    response_model=List[PopulatedPostResponse],
    responses={**_SERVER_ERROR},
    summary="List all posts",
    description=(
        "Returns every post, newest first, with the author's name and email "
        "and the category name resolved."
    ),
)
async def list_posts(
    service: PostService = Depends(get_post_service),
) -> List[PopulatedPostResponse]:
    return await service.list_posts()


@router.get(
    "/{slug}",
    response_model=PopulatedPostResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a post by slug",
    description=(
        "Returns one post with author and category resolved. Each successful "
        "call counts as a view; the returned viewCount includes it."
    ),
)
async def get_post(
    slug: str,
    service: PostService = Depends(get_post_service),
) -> PopulatedPostResponse:
    return await service.get_post_by_slug(slug)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Update a post",
    description=(
        "Replaces the fields present in the body. viewCount and comments "
        "cannot be changed here."
    ),
)
async def update_post(
    post_id: uuid.UUID,
    payload: PostUpdate,
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await service.update_post(post_id, payload)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a post",
)
async def delete_post(
    post_id: uuid.UUID,
    service: PostService = Depends(get_post_service),
) -> MessageResponse:
    return await service.delete_post(post_id)


@router.post(
    "/{post_id}/comments",
    status_code=201,
    response_model=CommentAddedResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Add a comment to a post",
)
async def add_comment(
    post_id: uuid.UUID,
    payload: CommentCreate,
    service: PostService = Depends(get_post_service),
) -> CommentAddedResponse:
    return await service.add_comment(post_id, payload)


@router.put(
    "/{post_id}/view",
    response_model=ViewCountResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Count a view of a post",
)
async def increment_view(
    post_id: uuid.UUID,
    service: PostService = Depends(get_post_service),
) -> ViewCountResponse:
    return await service.increment_views(post_id)
