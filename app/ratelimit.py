from __future__ import annotations

import hashlib

import structlog
from fastapi import HTTPException, Request

from app.config import settings
from app.redis_client import redis_client

log = structlog.get_logger(__name__)

def _hash(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()[:24]

# fixed-window limiter using redis INCR + EXPIRE
def rate_limit(name: str, limit_per_window: int, window_seconds: int):
    async def _dep(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return

        ip = (request.client.host if request.client else "unknown").strip()
        key = f"rl:{name}:{_hash(ip)}"

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = pipe.execute()
        except Exception as e:
            # fail-open if redis is down
            log.warning("rate_limit_unavailable", limiter=name, error=e.__class__.__name__)
            return

        if int(count) > int(limit_per_window):
            log.info("rate_limited", limiter=name)
            raise HTTPException(status_code=429, detail="rate_limited")

    return _dep
