"""
Per-client moving-window rate limiting, used as a route dependency.

Counting and expiry are handled by the ``limits`` package (the engine behind
flask-limiter); this module adapts it to FastAPI dependencies and the API's
429 envelope.
"""
import math
from datetime import datetime, timezone

from fastapi import Request, Response
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from ..config.settings import get_settings

storage = MemoryStorage()
strategy = MovingWindowRateLimiter(storage)


class RateLimitExceeded(Exception):
    def __init__(self, window_seconds: int):
        self.window_seconds = window_seconds
        self.retry_after_minutes = math.ceil(window_seconds / 60)
        super().__init__(
            f"Too many requests. Please wait {self.retry_after_minutes} minutes before trying again."
        )


class RateLimiter:
    """Allow at most ``max_requests`` per client within ``window_seconds``."""

    def __init__(self, name: str, window_seconds: int, max_requests: int):
        self.name = name
        self.window_seconds = window_seconds
        self.max_requests = max_requests

    @property
    def item(self) -> RateLimitItemPerSecond:
        return RateLimitItemPerSecond(self.max_requests, self.window_seconds)

    def hit(self, client_id: str):
        """Record a request and return the window stats after it."""
        item = self.item
        if not strategy.hit(item, self.name, client_id):
            raise RateLimitExceeded(self.window_seconds)
        return strategy.get_window_stats(item, self.name, client_id)

    async def __call__(self, request: Request, response: Response) -> None:
        client_id = request.client.host if request.client else "unknown"
        stats = self.hit(client_id)
        reset_at = datetime.fromtimestamp(stats.reset_time, tz=timezone.utc)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(stats.remaining)
        response.headers["X-RateLimit-Reset"] = reset_at.isoformat()


def reset_rate_limits() -> None:
    storage.reset()


_settings = get_settings()

general_limiter = RateLimiter("general", _settings.general_rate_window, _settings.general_rate_limit)
auth_limiter = RateLimiter("auth", _settings.auth_rate_window, _settings.auth_rate_limit)
otp_limiter = RateLimiter("otp", _settings.otp_rate_window, _settings.otp_rate_limit)
