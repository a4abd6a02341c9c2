"""
MCP server core.

Combines the tool registry with rate limiting, response caching and usage
statistics. Transports (HTTP, stdio) talk to this class only.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from mcp_senado.infrastructure.cache import generate_cache_key
from mcp_senado.tools.base import ToolResult
from mcp_senado.utils.execution_logger import track_tool_execution
from mcp_senado.utils.logging_utils import log_cache_hit, log_cache_miss

from .errors import RateLimitError, error_to_tool_result
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class SenadoMCPServer:
    """
    Args:
        config: Application configuration
        registry: Registry with the tools to expose
        cache: Response cache (``LRUCache`` or ``NoOpCache``)
        rate_limiter: Token bucket (``RateLimiter`` or ``NoOpRateLimiter``)
    """

    def __init__(self, config, registry: ToolRegistry, cache, rate_limiter):
        self.config = config
        self.registry = registry
        self.cache = cache
        self.rate_limiter = rate_limiter
        self._started = False
        self.reset_stats()

    @property
    def name(self) -> str:
        return self.config.server.name

    @property
    def version(self) -> str:
        return self.config.server.version

    async def start(self) -> None:
        """Start background maintenance (cache expiry sweep)."""
        if self._started:
            return
        self.cache.start_cleanup(self.config.cache.cleanup_interval)
        self._started = True
        logger.info(
            f"{self.name} v{self.version} started with {self.registry.count()} tools",
            extra={"event_type": "server_start", "tool_count": self.registry.count()},
        )

    async def stop(self) -> None:
        await self.cache.stop_cleanup()
        self._started = False
        logger.info(f"{self.name} stopped", extra={"event_type": "server_stop"})

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.registry.list_tools()

    async def call_tool(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Invoke a tool with rate limiting and caching.

        Failures are returned as error results, never raised.
        """
        args = args or {}
        self._stats["tool_invocations"] += 1

        try:
            async with track_tool_execution(name, args) as metrics:
                if not self.rate_limiter.check_limit():
                    raise RateLimitError("Rate limit exceeded", self.rate_limiter.retry_after_ms())

                cache_enabled = self.config.cache.enabled
                cache_key = generate_cache_key(name, args)
                if cache_enabled:
                    cached = self.cache.get(cache_key)
                    if cached is not None:
                        self._stats["cache_hits"] += 1
                        metrics.cached = True
                        log_cache_hit(logger, cache_key)
                        return cached

                    self._stats["cache_misses"] += 1
                    log_cache_miss(logger, cache_key)

                result = await self.registry.invoke(name, args)
                if result.is_error:
                    self._stats["errors"] += 1
                elif cache_enabled:
                    self.cache.set(cache_key, result)
                return result
        except Exception as e:
            self._stats["errors"] += 1
            return error_to_tool_result(e, include_traceback=self.config.debug)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "tool_invocations": self._stats["tool_invocations"],
            "cache_hits": self._stats["cache_hits"],
            "cache_misses": self._stats["cache_misses"],
            "errors": self._stats["errors"],
            "start_time": self._start_time.isoformat(),
            "uptime": self.uptime_ms(),
            "cache": self.cache.get_stats().model_dump(),
            "rate_limiter": self.rate_limiter.get_stats(),
        }

    def get_health(self) -> Dict[str, Any]:
        cache_stats = self.cache.get_stats()
        return {
            "status": "healthy",
            "uptime": self.uptime_ms(),
            "tool_count": self.registry.count(),
            "stats": {
                "tool_invocations": self._stats["tool_invocations"],
                "cache_hit_rate": cache_stats.hit_rate,
                "errors": self._stats["errors"],
            },
        }

    def uptime_ms(self) -> int:
        return int((time.monotonic() - self._start_monotonic) * 1000)

    def reset_stats(self) -> None:
        self._stats = {"tool_invocations": 0, "cache_hits": 0, "cache_misses": 0, "errors": 0}
        self._start_time = datetime.now(timezone.utc)
        self._start_monotonic = time.monotonic()

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Cache cleared")
