"""
Per-caller request throttling for the search endpoint.

The in-memory limiter is advisory and process-local: it does not coordinate
across horizontally scaled instances. Deployments running several instances
should provide a RateLimiter backed by a shared store with key expiry and
install it through `set_rate_limiter`.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Protocol
from fastapi import Request
from place_search.core.config import settings

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    def check(self, key: str) -> bool: ...

    def sweep(self) -> int: ...


class RateLimitEntry:
    __slots__ = ("count", "reset_at")

    def __init__(self, count: int, reset_at: float):
        self.count = count
        self.reset_at = reset_at


class InMemoryRateLimiter:
    """Fixed window counter per key, held in a dict on the event loop thread."""

    def __init__(
        self,
        max_requests: int = settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = settings.RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.entries: Dict[str, RateLimitEntry] = {}

    def check(self, key: str) -> bool:
        now = self.clock()
        entry = self.entries.get(key)
        if entry is None or now > entry.reset_at:
            self.entries[key] = RateLimitEntry(1, now + self.window_seconds)
            return True
        entry.count += 1
        return entry.count <= self.max_requests

    def sweep(self) -> int:
        """Drop entries whose window has ended. Returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self.entries.items() if now > entry.reset_at]
        for key in expired:
            del self.entries[key]
        return len(expired)


async def sweep_periodically(get_limiter: Callable[[], RateLimiter], interval_seconds: float):
    """Sweep whichever limiter is installed at each tick."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = get_limiter().sweep()
        logger.debug(f"Rate limit sweep removed {removed} entries")


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    client = request.client
    if client and client.host:
        return client.host
    return "unknown"


_rate_limiter: Optional[RateLimiter] = None


def set_rate_limiter(limiter: RateLimiter):
    global _rate_limiter
    _rate_limiter = limiter


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency returning the process-wide limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = InMemoryRateLimiter()
    return _rate_limiter
