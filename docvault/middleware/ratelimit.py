"""
Rate Limiting Middleware
Per-client sliding-window request limiter for the API prefix
"""

import asyncio
import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse

from docvault.core.exceptions import RateLimitException
from docvault.core.logging import get_logger
from docvault.models.common import ErrorResponse

logger = get_logger(__name__)


class RateLimitMiddleware:
    """ASGI middleware allowing `max_calls` per `window_seconds` per key"""

    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        key_func: Callable[[Request], str],
        include_path_prefixes: Iterable[str] = ("/api",),
    ):
        self.app = app
        self.window = window_seconds
        self.max_calls = max_calls
        self.key_func = key_func
        self.include_paths = tuple(include_path_prefixes)

        self._buckets: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0
        self._lock = asyncio.Lock()

    def _should_guard(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.include_paths)

    def _sweep(self, cutoff: float) -> None:
        """Drop keys whose newest request has left the window"""
        stale = [key for key, q in self._buckets.items() if not q or q[-1] <= cutoff]
        for key in stale:
            del self._buckets[key]

    async def hit(self, key: str, now: float) -> int:
        """
        Record a request for `key`

        Returns:
            0 when allowed, otherwise the seconds until a slot frees up
        """
        async with self._lock:
            cutoff = now - self.window
            if now - self._last_sweep >= self.window:
                self._sweep(cutoff)
                self._last_sweep = now

            q = self._buckets.get(key)
            if q is None:
                q = deque()
                self._buckets[key] = q

            while q and q[0] <= cutoff:
                q.popleft()

            if len(q) >= self.max_calls:
                return max(1, int(q[0] + self.window - now))

            q.append(now)
            return 0

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "")
        if not self._should_guard(path):
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive)
        key = self.key_func(request)

        retry_after = await self.hit(key, time.time())
        if retry_after:
            exc = RateLimitException(
                message="Too many requests from this IP, please try again later.",
                retry_after=retry_after,
            )
            logger.warning(f"Rate limit exceeded for {key} on {path}")
            resp = JSONResponse(
                status_code=exc.status_code,
                content=ErrorResponse(message=exc.message, code=exc.code).model_dump(
                    exclude_none=True
                ),
            )
            resp.headers["Retry-After"] = str(retry_after)
            return await resp(scope, receive, send)

        return await self.app(scope, receive, send)


def client_ip_key(req: Request) -> str:
    """Rate-limit key: the client address"""
    ip = req.client.host if req.client else "unknown"
    return f"ip:{ip}"
