"""
ChatGuard Backend — Client Key Resolution
===========================================

What:  Derives the key the rate limiter counts requests against.
How:   First entry of X-Forwarded-For (trimmed), else the transport peer
       address, else the constant "local".

Caveat:
    X-Forwarded-For is client-controlled unless a trusted proxy overwrites it.
    Deploy behind a proxy that sets the header, or clients can pick their key.
"""

from typing import Optional

from starlette.requests import Request

LOCAL_CLIENT_KEY = "local"


def derive_client_key(forwarded_for: Optional[str], peer_host: Optional[str]) -> str:
    """Pure derivation from the header value and peer address."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if peer_host:
        return peer_host
    return LOCAL_CLIENT_KEY


def client_key_from_request(request: Request) -> str:
    peer_host = request.client.host if request.client else None
    return derive_client_key(request.headers.get("x-forwarded-for"), peer_host)
