"""
Blog Posts API — Application Package
======================================

What: CRUD HTTP API for blog posts, their comments and view counts.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     PostService (Request Handler)   │  ← store calls, error mapping
    ├─────────────────────────────────────┤
    │        PostStore (Persistence)      │  ← validation, slugs, queries
    ├─────────────────────────────────────┤
    │   Models & Schemas / Database       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    PostService receives its PostStore as a constructor argument, so each
    layer can be tested with the one below replaced.
"""

__version__ = "1.0.0"
