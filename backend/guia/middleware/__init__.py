# Middleware package init
"""
Guia Backend — Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for every log line of the request
    2. Logging: one access line per request with status and duration
    3. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

    Responses travel back through the same chain in reverse, so the
    request ID header and the access log see the final status code.
"""
