"""
ChatGuard Backend — Application Package Initializer
====================================================

What: Marks the `chatguard` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin HTTP shell around a small decision pipeline:

    ┌─────────────────────────────────────┐
    │      Middleware + Routes (HTTP)     │  ← request IDs, access log, headers, CORS
    ├─────────────────────────────────────┤
    │      ChatService (Pipeline)         │  ← limiter → validator → composer
    ├─────────────────────────────────────┤
    │   Limiter / Validator / Composer    │  ← pure decision logic, no HTTP
    │   Error Mapper                      │
    └─────────────────────────────────────┘

    Routes translate HTTP into a (client key, raw body) pair and render the
    pipeline's outcome. Everything below the pipeline is testable without HTTP.
"""

__version__ = "1.0.0"
