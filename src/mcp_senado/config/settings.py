"""
Configuration management for the MCP Senado server.

Settings are grouped by concern in pydantic-settings sections. Values are
resolved with the following precedence:

    environment variables (and .env) > .mcprc.json > defaults

Durations are expressed in milliseconds.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, ValidationError as PydanticValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcp_senado import __version__
from mcp_senado.core.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".mcprc.json"


class ServerConfig(BaseSettings):
    """MCP server identity and transport."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_SERVER_", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    name: str = "mcp-senado"
    version: str = __version__
    transport: str = Field("stdio", validation_alias=AliasChoices("MCP_TRANSPORT"))

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Server name is required")
        return v.strip()

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        v = v.lower()
        if v not in ("stdio", "http"):
            raise ValueError("Transport must be 'stdio' or 'http'")
        return v


class HTTPConfig(BaseSettings):
    """HTTP transport configuration."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore", populate_by_name=True)

    host: str = Field("0.0.0.0", validation_alias=AliasChoices("MCP_HTTP_HOST", "HTTP_HOST"))
    port: int = Field(3000, validation_alias=AliasChoices("MCP_HTTP_PORT", "HTTP_PORT"))
    cors_enabled: bool = Field(True, validation_alias=AliasChoices("MCP_CORS_ENABLED"))
    cors_origins: str = Field(
        "*",
        description="Comma separated list of allowed origins",
        validation_alias=AliasChoices("MCP_CORS_ORIGINS", "HTTP_CORS_ORIGIN"),
    )
    auth_enabled: bool = Field(False, validation_alias=AliasChoices("HTTP_AUTH_ENABLED"))
    auth_token: Optional[str] = Field(None, validation_alias=AliasChoices("HTTP_AUTH_TOKEN", "MCP_API_KEY"))
    request_timeout: int = Field(
        30000, description="Request timeout in ms", validation_alias=AliasChoices("HTTP_REQUEST_TIMEOUT")
    )
    sse_ping_interval: int = Field(
        30000, description="SSE keep-alive ping interval in ms", validation_alias=AliasChoices("HTTP_SSE_PING_INTERVAL")
    )
    sse_connection_timeout: int = Field(
        55000,
        description="SSE connection lifetime in ms",
        validation_alias=AliasChoices("HTTP_SSE_CONNECTION_TIMEOUT"),
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("HTTP port must be between 1 and 65535")
        return v

    @field_validator("request_timeout", "sse_ping_interval", "sse_connection_timeout")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            label = {
                "request_timeout": "request timeout",
                "sse_ping_interval": "SSE ping interval",
                "sse_connection_timeout": "SSE connection timeout",
            }[info.field_name]
            raise ValueError(f"HTTP {label} must be positive")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class SenadoAPIConfig(BaseSettings):
    """Senate open-data API client configuration."""

    model_config = SettingsConfigDict(env_prefix="SENADO_API_", case_sensitive=False, extra="ignore")

    base_url: str = "https://legis.senado.leg.br/dadosabertos"
    timeout: int = Field(30000, description="Request timeout in ms")
    max_retries: int = 3
    retry_delay: int = Field(1000, description="Base retry delay in ms, doubled on every attempt")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("API timeout must be positive")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("API max retries must be non-negative")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must be an http(s) URL")
        return v


class CacheConfig(BaseSettings):
    """Response cache configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_CACHE_", case_sensitive=False, extra="ignore")

    enabled: bool = True
    ttl: int = Field(300000, description="Entry time-to-live in ms")
    max_size: int = 1000
    cleanup_interval: int = Field(60000, description="Expired entry sweep interval in ms")

    @field_validator("ttl", "max_size", "cleanup_interval")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            label = {"ttl": "TTL", "max_size": "max size", "cleanup_interval": "cleanup interval"}[info.field_name]
            raise ValueError(f"Cache {label} must be positive")
        return v


class RateLimitConfig(BaseSettings):
    """Token bucket rate limiter configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_RATE_LIMIT_", case_sensitive=False, extra="ignore")

    enabled: bool = True
    tokens: int = 30
    interval: int = Field(60000, description="Rate limit window in ms")
    refill_rate: int = Field(2000, description="Milliseconds needed to refill one token")

    @field_validator("tokens", "interval", "refill_rate")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            label = info.field_name.replace("_", " ")
            raise ValueError(f"Rate limit {label} must be positive")
        return v


class CircuitBreakerConfig(BaseSettings):
    """Circuit breaker configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_CIRCUIT_BREAKER_", case_sensitive=False, extra="ignore")

    enabled: bool = True
    failure_threshold: int = 5
    success_threshold: int = 2
    timeout: int = Field(60000, description="Time in ms before an open circuit is half-opened")

    @field_validator("failure_threshold", "success_threshold", "timeout")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            label = info.field_name.replace("_", " ")
            raise ValueError(f"Circuit breaker {label} must be positive")
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_LOG_", case_sensitive=False, extra="ignore")

    level: str = "INFO"
    format: str = "json"
    mask_pii: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v == "WARN":
            v = "WARNING"
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError("Log level must be one of DEBUG, INFO, WARNING, ERROR")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v


SECTIONS: Dict[str, Type[BaseSettings]] = {
    "server": ServerConfig,
    "http": HTTPConfig,
    "api": SenadoAPIConfig,
    "cache": CacheConfig,
    "rate_limit": RateLimitConfig,
    "circuit_breaker": CircuitBreakerConfig,
    "logging": LoggingConfig,
}

# .mcprc.json key -> (section, field)
RC_FILE_KEYS: Dict[str, Tuple[str, str]] = {
    "serverName": ("server", "name"),
    "serverVersion": ("server", "version"),
    "transport": ("server", "transport"),
    "httpPort": ("http", "port"),
    "httpHost": ("http", "host"),
    "corsEnabled": ("http", "cors_enabled"),
    "corsOrigins": ("http", "cors_origins"),
    "apiKey": ("http", "auth_token"),
    "senadoApiBaseUrl": ("api", "base_url"),
    "senadoApiTimeout": ("api", "timeout"),
    "senadoApiMaxRetries": ("api", "max_retries"),
    "senadoApiRetryDelay": ("api", "retry_delay"),
    "cacheEnabled": ("cache", "enabled"),
    "cacheTtl": ("cache", "ttl"),
    "cacheMaxSize": ("cache", "max_size"),
    "cacheCleanupInterval": ("cache", "cleanup_interval"),
    "rateLimitEnabled": ("rate_limit", "enabled"),
    "rateLimitTokens": ("rate_limit", "tokens"),
    "rateLimitInterval": ("rate_limit", "interval"),
    "rateLimitRefillRate": ("rate_limit", "refill_rate"),
    "circuitBreakerEnabled": ("circuit_breaker", "enabled"),
    "circuitBreakerFailureThreshold": ("circuit_breaker", "failure_threshold"),
    "circuitBreakerSuccessThreshold": ("circuit_breaker", "success_threshold"),
    "circuitBreakerTimeout": ("circuit_breaker", "timeout"),
    "logLevel": ("logging", "level"),
    "logFormat": ("logging", "format"),
    "logMaskPII": ("logging", "mask_pii"),
}


def read_rc_file(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """
    Read ``.mcprc.json`` and group its values by settings section.

    Args:
        path: File to read. Defaults to ``$MCP_CONFIG_FILE`` or ``./.mcprc.json``.

    Returns:
        Mapping of section name to field overrides. Empty when the file is
        missing or unreadable.
    """
    path = Path(path or os.getenv("MCP_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    if not path.is_file():
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config file {path}: {e}")
        return {}

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring config file {path}: expected a JSON object")
        return {}

    sections: Dict[str, Dict[str, Any]] = {}
    for key, value in raw.items():
        target = RC_FILE_KEYS.get(key)
        if target is None or value is None:
            continue
        section, field_name = target
        sections.setdefault(section, {})[field_name] = value
    return sections


def _env_names(section_cls: Type[BaseSettings], field_name: str) -> List[str]:
    field_info = section_cls.model_fields[field_name]
    alias = field_info.validation_alias
    if isinstance(alias, AliasChoices):
        return [choice for choice in alias.choices if isinstance(choice, str)]
    prefix = section_cls.model_config.get("env_prefix", "")
    return [f"{prefix}{field_name}"]


def _env_is_set(section_cls: Type[BaseSettings], field_name: str) -> bool:
    environ = {key.upper() for key in os.environ}
    return any(name.upper() in environ for name in _env_names(section_cls, field_name))


def _format_validation_errors(exc: PydanticValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        message = error.get("msg", "")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        else:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = f"{location}: {message}" if location else message
        messages.append(message)
    return messages


class AppConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: str = "production"
    debug: bool = False

    # Sub-configurations
    server: ServerConfig
    http: HTTPConfig
    api: SenadoAPIConfig
    cache: CacheConfig
    rate_limit: RateLimitConfig
    circuit_breaker: CircuitBreakerConfig
    logging: LoggingConfig

    def __init__(self, config_file: Optional[Path] = None, **kwargs):
        rc_values = read_rc_file(config_file)

        errors: List[str] = []
        for name, section_cls in SECTIONS.items():
            if name in kwargs:
                continue
            overrides = {
                field_name: value
                for field_name, value in rc_values.get(name, {}).items()
                if not _env_is_set(section_cls, field_name)
            }
            try:
                kwargs[name] = section_cls(**overrides)
            except PydanticValidationError as e:
                errors.extend(_format_validation_errors(e))

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors))

        super().__init__(**kwargs)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"


# Global configuration instance
config: Optional[AppConfig] = None


def load_config(config_file: Optional[Path] = None) -> AppConfig:
    """
    Build a configuration from the environment, ``.mcprc.json`` and defaults.

    Args:
        config_file: Optional path to a ``.mcprc.json`` file

    Returns:
        AppConfig: A fresh configuration instance.

    Raises:
        ConfigurationError: If any setting fails validation.
    """
    try:
        return AppConfig(config_file=config_file)
    except PydanticValidationError as e:
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(_format_validation_errors(e))) from e


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Returns:
        AppConfig: The application configuration instance.
    """
    global config
    if config is None:
        config = load_config()
    return config


def reload_config() -> AppConfig:
    """
    Reload the configuration from environment variables.

    Returns:
        AppConfig: The reloaded application configuration instance.
    """
    global config
    config = load_config()
    return config
