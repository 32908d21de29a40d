"""
Blog Posts API — Services Layer
=================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - PostStore (abstract): persistence contract for posts and comments
    - SQLAlchemyPostStore: PostStore over an async SQLAlchemy session
    - PostService: request handler orchestrating store calls
    - slugify: slug derivation used by the store
"""
