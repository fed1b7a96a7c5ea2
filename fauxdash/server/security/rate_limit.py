"""
In-memory fixed-window rate limiting.

Windows live in a dict keyed by ``<prefix>:<key>``. Expired windows are swept
lazily, at most once per cleanup interval, whenever a check runs. The store is
per process; several workers each keep their own counters.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import HTTPException, status

from fauxdash.core.logging_config import get_logger

logger = get_logger(__name__)

CLEANUP_INTERVAL = 60.0


@dataclass(frozen=True)
class RateLimitRule:
    window_seconds: float
    max_requests: int
    key_prefix: str = ""


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float
    retry_after: Optional[int] = None


@dataclass
class _Window:
    count: int
    reset_at: float


RATE_LIMITS: Dict[str, RateLimitRule] = {
    "login": RateLimitRule(window_seconds=60, max_requests=5, key_prefix="login"),
    "password_reset": RateLimitRule(window_seconds=3600, max_requests=3, key_prefix="password-reset"),
    "password_change": RateLimitRule(window_seconds=3600, max_requests=5, key_prefix="password-change"),
    "api": RateLimitRule(window_seconds=60, max_requests=100, key_prefix="api"),
}


class RateLimiter:
    """Fixed-window request counter."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_cleanup = clock()

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL:
            return
        self._last_cleanup = now
        for key in [k for k, w in self._windows.items() if w.reset_at < now]:
            del self._windows[key]

    def check(self, key: str, rule: RateLimitRule) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is allowed.

        Args:
            key: Caller identity, e.g. client IP or user id
            rule: Window length and request budget

        Returns:
            Result carrying remaining budget and reset time (epoch seconds)
        """
        now = self._clock()
        self._cleanup(now)

        full_key = f"{rule.key_prefix}:{key}" if rule.key_prefix else key
        window = self._windows.get(full_key)

        if window is None or window.reset_at < now:
            window = _Window(count=1, reset_at=now + rule.window_seconds)
            self._windows[full_key] = window
            return RateLimitResult(success=True, remaining=rule.max_requests - 1, reset_at=window.reset_at)

        window.count += 1
        if window.count > rule.max_requests:
            return RateLimitResult(
                success=False,
                remaining=0,
                reset_at=window.reset_at,
                retry_after=math.ceil(window.reset_at - now),
            )
        return RateLimitResult(success=True, remaining=rule.max_requests - window.count, reset_at=window.reset_at)

    def reset(self) -> None:
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


rate_limiter = RateLimiter()


def raise_if_limited(result: RateLimitResult) -> None:
    """Turn a rejected check into HTTP 429 with retry headers."""
    if result.success:
        return
    retry_after = result.retry_after or 60
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Please try again later.",
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(math.ceil(result.reset_at)),
        },
    )


def enforce_rate_limit(key: str, preset: str) -> RateLimitResult:
    """Check ``key`` against a named preset and raise 429 when over the limit."""
    result = rate_limiter.check(key, RATE_LIMITS[preset])
    if not result.success:
        logger.warning(f"Rate limit exceeded: preset={preset}, key={key}")
    raise_if_limited(result)
    return result
