"""
Token bucket rate limiter for tool invocations.
"""

import asyncio
import logging
import math
import time
from typing import Any, Callable, Dict, Optional

from mcp_senado.core.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Token bucket.

    The bucket starts full with ``max_tokens``. One token is added every
    ``refill_rate`` milliseconds, never exceeding ``max_tokens``.

    Args:
        max_tokens: Bucket capacity
        interval: Rate limit window in milliseconds, also the default maximum
            wait of ``wait_for_token``
        refill_rate: Milliseconds needed to regain one token
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        max_tokens: int,
        interval: int,
        refill_rate: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_tokens = max_tokens
        self.interval = interval
        self.refill_rate = refill_rate
        self._clock = clock
        self.tokens = max_tokens
        self.last_refill = clock()

    def _refill(self) -> None:
        elapsed_ms = (self._clock() - self.last_refill) * 1000
        new_tokens = math.floor(elapsed_ms / self.refill_rate)
        if new_tokens <= 0:
            return
        self.tokens = min(self.max_tokens, self.tokens + new_tokens)
        self.last_refill += new_tokens * self.refill_rate / 1000

    def check_limit(self) -> bool:
        """Consume one token. Returns False when the bucket is empty."""
        self._refill()
        if self.tokens > 0:
            self.tokens -= 1
            return True
        return False

    def retry_after_ms(self) -> float:
        """Milliseconds until the next token becomes available."""
        self._refill()
        if self.tokens > 0:
            return 0.0
        elapsed_ms = (self._clock() - self.last_refill) * 1000
        return max(0.0, self.refill_rate - elapsed_ms)

    async def wait_for_token(self, max_wait: Optional[int] = None) -> None:
        """
        Wait until a token can be consumed.

        Args:
            max_wait: Maximum wait in milliseconds, defaults to ``interval``

        Raises:
            RateLimitError: If no token became available in time.
        """
        max_wait = self.interval if max_wait is None else max_wait
        deadline = self._clock() + max_wait / 1000

        while not self.check_limit():
            wait_ms = self.retry_after_ms()
            if self._clock() + wait_ms / 1000 > deadline:
                raise RateLimitError(f"Rate limit exceeded, no token available within {max_wait}ms", wait_ms)
            await asyncio.sleep(wait_ms / 1000)

    def get_stats(self) -> Dict[str, Any]:
        self._refill()
        return {
            "tokens": self.tokens,
            "max_tokens": self.max_tokens,
            "refill_rate": self.refill_rate,
            "last_refill_time": self.last_refill,
        }

    def reset(self) -> None:
        self.tokens = self.max_tokens
        self.last_refill = self._clock()


class NoOpRateLimiter:
    """Limiter used when rate limiting is disabled."""

    def check_limit(self) -> bool:
        return True

    def retry_after_ms(self) -> float:
        return 0.0

    async def wait_for_token(self, max_wait: Optional[int] = None) -> None:
        return None

    def get_stats(self) -> Dict[str, Any]:
        return {"enabled": False}

    def reset(self) -> None:
        return None


def create_rate_limiter(rate_limit_config) -> Any:
    """Build the rate limiter described by a ``RateLimitConfig``."""
    if not rate_limit_config.enabled:
        logger.info("Rate limiting disabled")
        return NoOpRateLimiter()
    return RateLimiter(
        max_tokens=rate_limit_config.tokens,
        interval=rate_limit_config.interval,
        refill_rate=rate_limit_config.refill_rate,
    )
