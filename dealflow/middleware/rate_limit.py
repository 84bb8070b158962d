"""Rate limiting for the pipeline tools.

Sliding-window limiter: each tool may be called a configurable number of
times per window.

Read tools: ``settings.rate_limit_default`` requests / minute
Write tools (create / update / delete): ``settings.rate_limit_write`` requests / minute
"""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from dealflow.config import settings


class RateLimiter:
    """Sliding-window rate limiter.

    Safe under concurrent handlers via asyncio.Lock.  Each tool gets its own
    request window.

    Attributes:
        enabled: When False every request is allowed.
        default_max_requests: Default cap per tool (per window).
        default_window_seconds: Default sliding-window length in seconds.
    """

    def __init__(
        self,
        default_max_requests: int = 60,
        default_window_seconds: int = 60,
        enabled: bool = True,
    ) -> None:
        self.enabled = enabled
        self.default_max_requests = default_max_requests
        self.default_window_seconds = default_window_seconds
        # tool_name -> deque of monotonic timestamps
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def check_rate_limit(
        self,
        tool_name: str,
        max_requests: int | None = None,
        window_seconds: int | None = None,
    ) -> tuple[bool, str | None]:
        """Check whether a request to *tool_name* is within the rate limit.

        Returns:
            (allowed, error_message) – *allowed* is ``True`` if the request
            should proceed.  *error_message* is ``None`` when allowed, or a
            human-readable explanation when denied.
        """
        if not self.enabled:
            return True, None

        max_req = max_requests or self.default_max_requests
        window = window_seconds or self.default_window_seconds

        async with self._lock:
            now = time.monotonic()
            timestamps = self._requests[tool_name]

            while timestamps and timestamps[0] <= now - window:
                timestamps.popleft()

            if len(timestamps) >= max_req:
                retry_after = int(timestamps[0] + window - now) + 1
                return False, (
                    f"Rate limit exceeded for '{tool_name}'. "
                    f"Max {max_req} requests per {window}s. "
                    f"Retry after {retry_after}s."
                )

            timestamps.append(now)
            return True, None

    async def reset(self, tool_name: str | None = None) -> None:
        """Reset counters.  If *tool_name* is ``None``, reset everything."""
        async with self._lock:
            if tool_name:
                self._requests.pop(tool_name, None)
            else:
                self._requests.clear()


# Module-level singleton used by tool handlers.
rate_limiter = RateLimiter(
    default_max_requests=settings.rate_limit_default,
    enabled=settings.rate_limit_enabled,
)

_READ = {"max_requests": settings.rate_limit_default, "window_seconds": 60}
_WRITE = {"max_requests": settings.rate_limit_write, "window_seconds": 60}

TOOL_RATE_LIMITS: dict[str, dict[str, int]] = {
    "list_companies": _READ,
    "get_company": _READ,
    "get_dashboard_stats": _READ,
    "get_recent_companies": _READ,
    "get_company_ranking": _READ,
    "list_interactions": _READ,
    "list_comments": _READ,
    "create_company": _WRITE,
    "update_company": _WRITE,
    "delete_company": _WRITE,
    "log_interaction": _WRITE,
    "update_interaction": _WRITE,
    "delete_interaction": _WRITE,
    "add_comment": _WRITE,
    "delete_comment": _WRITE,
}
