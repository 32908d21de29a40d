"""
Blog Posts API — ORM Models Package

Importing this package registers every mapped class with `Base.metadata`,
so string-based relationships resolve and Alembic sees all tables.
"""

from blogapi.models.user import User
from blogapi.models.category import Category
from blogapi.models.post import Comment, Post

__all__ = ["User", "Category", "Post", "Comment"]
