# Routes package init
"""
ChatGuard Backend — API Routes Package
========================================

Route Inventory:
    - chat.py:    POST /chat     (validated, rate-limited chat reply)
    - health.py:  GET  /health   (liveness check)
                  GET  /         (plain-text banner)

Routes stay THIN: they extract the client key and body, call ChatService,
and render its outcome. Decision logic lives in services/.
"""
