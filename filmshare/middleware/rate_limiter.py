# filmshare/middleware/rate_limiter.py
# Rate limiting middleware; shared-link decoding is CPU work driven by untrusted input
# Uses in-memory sliding window counter per client

import logging
import time
from collections import defaultdict
from typing import Dict, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from filmshare.middleware.error_handler import RateLimitError, create_error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class SlidingWindowCounter:
    """
    Sliding window rate limiter implementation.
    More accurate than fixed window, less memory than sliding log.
    """

    def __init__(self, window_size: int = WINDOW_SECONDS, max_requests: int = 100):
        self.window_size = window_size  # seconds
        self.max_requests = max_requests
        # key -> (prev_count, curr_count, window_start)
        self._counters: Dict[str, Tuple[int, int, float]] = defaultdict(lambda: (0, 0, 0.0))

    def is_allowed(self, key: str) -> Tuple[bool, int]:
        """
        Check if request is allowed for given key.
        Returns (is_allowed, remaining_requests).
        """
        now = time.time()
        prev_count, curr_count, window_start = self._counters[key]
        current_window = now // self.window_size

        if window_start < current_window - 1:
            # more than one window has passed
            prev_count, curr_count = 0, 1
            window_start = current_window
        elif window_start < current_window:
            prev_count, curr_count = curr_count, 1
            window_start = current_window
        else:
            curr_count += 1

        # weighted count approximates a true sliding window
        weight = (now % self.window_size) / self.window_size
        weighted_count = prev_count * (1 - weight) + curr_count

        self._counters[key] = (prev_count, curr_count, window_start)

        remaining = max(0, int(self.max_requests - weighted_count))
        return weighted_count <= self.max_requests, remaining

    def cleanup_old_entries(self, max_age: int = 300):
        """Remove entries older than max_age seconds."""
        current_window = time.time() // self.window_size
        stale = [
            key for key, (_, _, window_start) in self._counters.items()
            if current_window - window_start > max_age // self.window_size
        ]
        for key in stale:
            del self._counters[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Stricter limit for /api/ than for everything else; health checks are exempt."""

    def __init__(self, app, api_limit: int = 60, general_limit: int = 200):
        super().__init__(app)
        self.api_limiter = SlidingWindowCounter(max_requests=api_limit)
        self.general_limiter = SlidingWindowCounter(max_requests=general_limit)
        self._last_cleanup = time.time()

    def _get_client_key(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip
        if request.client:
            return request.client.host
        return "unknown"

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/health"):
            return await call_next(request)

        now = time.time()
        if now - self._last_cleanup > 300:
            self.api_limiter.cleanup_old_entries()
            self.general_limiter.cleanup_old_entries()
            self._last_cleanup = now

        client_key = self._get_client_key(request)
        limiter = self.api_limiter if request.url.path.startswith("/api/") else self.general_limiter
        is_allowed, remaining = limiter.is_allowed(client_key)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_key} on {request.url.path}")
            error = RateLimitError(retry_after=WINDOW_SECONDS)
            response = create_error_response(
                error_code=error.error_code,
                message=error.message,
                status_code=error.status_code,
                details=error.details,
            )
            response.headers["Retry-After"] = str(WINDOW_SECONDS)
            response.headers["X-RateLimit-Remaining"] = "0"
            return response

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
        return response
