from __future__ import annotations

import hashlib

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ats_engine.core.config import settings


def client_key(request: Request) -> str:
    """Bucket callers by API key when one is sent, otherwise by address."""
    api_key = (request.headers.get("X-API-Key") or "").strip()
    if api_key:
        return "key:" + hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:16]
    return "ip:" + get_remote_address(request)


limiter = Limiter(key_func=client_key, enabled=settings.rate_limit_enabled)


def rate_limit(limit: str | None = None):
    if not settings.rate_limit_enabled:

        def passthrough(func):
            return func

        return passthrough
    return limiter.limit(limit or settings.rate_limit)
