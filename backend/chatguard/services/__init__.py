# Services package init
"""
ChatGuard Backend — Services Layer
====================================

What:  The chat decision pipeline, free of HTTP concerns.

Service Inventory:
    - clock.py:         Millisecond clock source
    - rate_limiter.py:  Per-client sliding window limiter
    - validator.py:     Ordered message checks and normalization
    - composer.py:      Static structured reply
    - error_mapper.py:  Failure kind → (status, code, message)
    - client_key.py:    Client key from X-Forwarded-For / peer address
    - chat_service.py:  Orchestrates the above; never raises
"""
