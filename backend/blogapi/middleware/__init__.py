"""
Blog Posts API — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: generate or accept the correlation ID
    2. Logging: one access line per request, tagged with the request ID
    3. GZip / CORS: Starlette built-ins configured in main.py
"""
