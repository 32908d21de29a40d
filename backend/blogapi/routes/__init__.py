"""
Blog Posts API — Routes Package
=================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - posts.py:   POST   {prefix}                 create a post
                  GET    {prefix}                 list posts (newest first)
                  GET    {prefix}/{slug}          get a post, count a view
                  PUT    {prefix}/{id}            update a post
                  DELETE {prefix}/{id}            delete a post
                  POST   {prefix}/{id}/comments   add a comment
                  PUT    {prefix}/{id}/view       count a view
    - health.py:  GET    /health                  service health check

    {prefix} is settings.api_prefix (default /api/posts).

Routes stay thin: they read the path/body, call PostService, and pick the
success status code. Error statuses come from the global exception handlers.
"""
