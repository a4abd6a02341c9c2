"""
Shared fixtures for the MCP Senado test suite.
"""

import logging
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_senado.config.settings import (
    AppConfig,
    CacheConfig,
    CircuitBreakerConfig,
    HTTPConfig,
    LoggingConfig,
    RateLimitConfig,
    SenadoAPIConfig,
    ServerConfig,
)
from mcp_senado.tools.base import ToolContext

_ENV_PREFIXES = ("MCP_", "HTTP_", "SENADO_API_")
_ENV_NAMES = ("ENVIRONMENT", "DEBUG")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .mcprc.json."""
    for key in list(os.environ):
        if key.upper().startswith(_ENV_PREFIXES) or key.upper() in _ENV_NAMES:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MCP_CONFIG_FILE", str(tmp_path / "missing.mcprc.json"))


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


def make_config(**sections) -> AppConfig:
    """Build an AppConfig with explicit sections, defaults for the rest."""
    defaults = {
        "server": ServerConfig(),
        "http": HTTPConfig(),
        "api": SenadoAPIConfig(),
        "cache": CacheConfig(),
        "rate_limit": RateLimitConfig(),
        "circuit_breaker": CircuitBreakerConfig(),
        "logging": LoggingConfig(),
    }
    defaults.update(sections)
    return AppConfig(**defaults)


def make_http_client(return_value=None, side_effect=None) -> MagicMock:
    """Fake Senate API client recording ``get(endpoint, params)`` calls."""
    client = MagicMock()
    client.get = AsyncMock(return_value=return_value if return_value is not None else {}, side_effect=side_effect)
    client.close = AsyncMock()
    return client


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def http_client() -> MagicMock:
    return make_http_client()


@pytest.fixture
def context(http_client) -> ToolContext:
    return ToolContext(http_client=http_client)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
