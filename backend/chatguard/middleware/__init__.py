# Middleware package init
"""
ChatGuard Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Security Headers] → [CORS] → Route Handler

    1. Request ID: Correlation ID for every log line of the request
    2. Logging: Access log with status and duration (uses the request ID)
    3. Security Headers: Hardening headers on every response
    4. CORS: Applied by Starlette's CORSMiddleware (handles preflight)

Rate limiting is NOT middleware here: it belongs to the chat pipeline
(services/chat_service.py) so that it applies to POST /chat only and runs
before the body is validated.
"""
