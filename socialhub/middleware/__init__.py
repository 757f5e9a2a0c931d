# Middleware package init
"""
SocialHub Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit FIRST: reject abusive clients before any processing
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: method, path, status, duration with the request ID

    Responses travel the chain in reverse, so the request ID header and the
    logged status/duration are both available on the way out.
"""
