"""
Service wiring.

Builds the object graph behind both transports: configuration, cache, rate
limiter, circuit breaker, Senate API client, tool registry and MCP server.
"""

import logging
from typing import Optional

from mcp_senado.config.settings import AppConfig, get_config
from mcp_senado.core.registry import ToolRegistry
from mcp_senado.core.server import SenadoMCPServer
from mcp_senado.infrastructure.cache import create_cache
from mcp_senado.infrastructure.circuit_breaker import create_circuit_breaker
from mcp_senado.infrastructure.http_client import SenadoHttpClient
from mcp_senado.infrastructure.rate_limiter import create_rate_limiter
from mcp_senado.tools.base import ToolContext
from mcp_senado.tools.catalog import register_all_tools

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating and managing service instances.

    Each service is created once per factory and shared by the transports.

    Args:
        config: Configuration to use, the global configuration by default
        http_client: Pre-built Senate API client (tests inject fakes here)
    """

    def __init__(self, config: Optional[AppConfig] = None, http_client=None):
        self._config = config
        self._services: dict = {}
        if http_client is not None:
            self._services["http_client"] = http_client
        self._initialized = False

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    def _get(self, name: str, build):
        if name not in self._services:
            self._services[name] = build()
            logger.debug(f"Created service {name}")
        return self._services[name]

    def get_cache(self):
        return self._get("cache", lambda: create_cache(self.config.cache))

    def get_rate_limiter(self):
        return self._get("rate_limiter", lambda: create_rate_limiter(self.config.rate_limit))

    def get_circuit_breaker(self):
        return self._get("circuit_breaker", lambda: create_circuit_breaker(self.config.circuit_breaker))

    def get_http_client(self):
        return self._get("http_client", lambda: SenadoHttpClient(self.config.api, self.get_circuit_breaker()))

    def get_registry(self) -> ToolRegistry:
        def build() -> ToolRegistry:
            context = ToolContext(http_client=self.get_http_client(), cache=self.get_cache(), config=self.config)
            registry = ToolRegistry(context)
            register_all_tools(registry)
            return registry

        return self._get("registry", build)

    def get_server(self) -> SenadoMCPServer:
        return self._get(
            "server",
            lambda: SenadoMCPServer(self.config, self.get_registry(), self.get_cache(), self.get_rate_limiter()),
        )

    def initialize(self) -> SenadoMCPServer:
        """Initialize all services with their dependencies."""
        server = self.get_server()
        if not self._initialized:
            self._initialized = True
            logger.info(
                "Service factory initialized",
                extra={
                    "tool_count": server.registry.count(),
                    "cache_enabled": self.config.cache.enabled,
                    "rate_limit_enabled": self.config.rate_limit.enabled,
                    "circuit_breaker_enabled": self.config.circuit_breaker.enabled,
                },
            )
        return server

    async def shutdown(self) -> None:
        """Stop the server and release network resources."""
        server = self._services.get("server")
        if server is not None:
            await server.stop()
        http_client = self._services.get("http_client")
        if http_client is not None and hasattr(http_client, "close"):
            await http_client.close()

    def reset(self) -> None:
        """Reset all services (useful for testing)."""
        self._services.clear()
        self._initialized = False
        logger.info("Service factory reset")


# Global service factory instance
_service_factory: Optional[ServiceFactory] = None


def get_service_factory() -> ServiceFactory:
    """Get the global service factory, creating it on first use."""
    global _service_factory
    if _service_factory is None:
        _service_factory = ServiceFactory()
    return _service_factory
