"""Pure-ASGI guards in front of every transport.

Both guards are plain ASGI callables rather than ``BaseHTTPMiddleware`` so
that long-lived SSE streams pass through untouched. Rate limiting is meant to
wrap authentication (outermost), and both leave the liveness path alone.
"""

from __future__ import annotations

import hmac
import math
from typing import TYPE_CHECKING

from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from fareway.runtime.observability import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from fareway.runtime.ratelimit import FixedWindowRateLimiter

log = get_logger("security")

EXEMPT_PATHS = frozenset({"/health"})


def _is_exempt(scope: Scope, exempt: frozenset[str]) -> bool:
    return scope["type"] != "http" or scope["path"] in exempt


class AuthMiddleware:
    """Shared-secret bearer authentication.

    - no secret configured → every request is admitted
    - missing or non-Bearer ``Authorization`` header → 401
    - wrong token → 403 (constant-time comparison)
    """

    def __init__(self, app: ASGIApp, api_key: str | None = None, *, exempt: frozenset[str] = EXEMPT_PATHS) -> None:
        self.app = app
        self.api_key = api_key or None
        self.exempt = exempt

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self.api_key is None or _is_exempt(scope, self.exempt):
            await self.app(scope, receive, send)
            return

        header = Headers(scope=scope).get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            response = JSONResponse({"error": "Missing or invalid authorization header"}, status_code=401)
        elif not hmac.compare_digest(token.strip().encode(), self.api_key.encode()):
            log.warning("rejected api key", path=scope["path"])
            response = JSONResponse({"error": "Invalid API key"}, status_code=403)
        else:
            await self.app(scope, receive, send)
            return
        await response(scope, receive, send)


class RateLimitMiddleware:
    """Fixed-window limit per client address; excess calls get 429."""

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter, *, exempt: frozenset[str] = EXEMPT_PATHS) -> None:
        self.app = app
        self.limiter = limiter
        self.exempt = exempt

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if _is_exempt(scope, self.exempt):
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        key = client[0] if client else "unknown"
        decision = self.limiter.check(key)
        if decision.allowed:
            await self.app(scope, receive, send)
            return

        retry_after = max(1, math.ceil(decision.retry_after))
        log.warning("rate limit exceeded", client=key, path=scope["path"], retry_after=retry_after)
        response = JSONResponse(
            {"error": "Too many requests, please try again later.", "retry_after": retry_after},
            status_code=429,
            headers={"Retry-After": str(retry_after)},
        )
        await response(scope, receive, send)
