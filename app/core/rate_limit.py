"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address.

Usage in routes:
    from fastapi import Request
    from app.core.rate_limit import limiter

    @router.post("")
    @limiter.limit(settings.review_write_rate_limit)
    async def create_review(request: Request, payload: ReviewCreate):
        ...

Wired into the app in main.py (app.state.limiter + RateLimitExceeded handler).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Write endpoints are anonymous, so the client IP is the only stable key.
limiter = Limiter(key_func=get_remote_address)
