"""
Structured logging setup.

Logs always go to stderr: stdout carries the JSON-RPC stream of the stdio
transport. JSON output uses python-json-logger, text output a classic
single-line format. Personally identifiable information found in the
``extra`` fields of a record is masked when ``mask_pii`` is enabled.
"""

import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = (
    "email",
    "telefone",
    "phone",
    "cpf",
    "cnpj",
    "password",
    "senha",
    "token",
    "apikey",
    "api_key",
    "authorization",
)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[\d\s\-()]{10,}$")

# Attributes every LogRecord has; anything else came in through ``extra``.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def mask_email(value: str) -> str:
    """``fulano@senado.leg.br`` -> ``f***o@senado.leg.br``"""
    local, _, domain = value.partition("@")
    if len(local) <= 2:
        return f"***@{domain}"
    return f"{local[0]}***{local[-1]}@{domain}"


def mask_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value)
    if len(digits) < 8:
        return REDACTED
    return f"{digits[:2]}****{digits[-2:]}"


def mask_sensitive_data(data: Any) -> Any:
    """Return a copy of ``data`` with sensitive keys and PII-looking values masked."""
    if isinstance(data, dict):
        return {
            key: REDACTED if isinstance(key, str) and is_sensitive_key(key) else mask_sensitive_data(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [mask_sensitive_data(item) for item in data]
    if isinstance(data, str):
        if _EMAIL_RE.match(data):
            return mask_email(data)
        if _PHONE_RE.match(data):
            return mask_phone(data)
    return data


class PIIMaskingFilter(logging.Filter):
    """Masks PII in the structured ``extra`` fields of log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in list(vars(record).items()):
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if is_sensitive_key(key):
                setattr(record, key, REDACTED)
            else:
                setattr(record, key, mask_sensitive_data(value))
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with the standard MCP Senado fields.

    Automatically adds:
    - timestamp (UTC ISO)
    - level
    - logger
    - service
    """

    def __init__(self, *args, service: str = "mcp-senado", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self.service

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def build_formatter(log_format: str, service: str = "mcp-senado") -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter("%(message)s", service=service)
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(logging_config, service: str = "mcp-senado", stream: Optional[Any] = None) -> logging.Logger:
    """
    Configure the root logger from a ``LoggingConfig``.

    Args:
        logging_config: Level, format and PII masking settings
        service: Service name added to JSON records
        stream: Output stream, stderr by default

    Returns:
        The configured root logger
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(build_formatter(logging_config.format, service))
    if logging_config.mask_pii:
        handler.addFilter(PIIMaskingFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, logging_config.level, logging.INFO))

    # aiohttp and uvicorn access logs are noisy at INFO
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    return root


def log_cache_hit(logger: logging.Logger, key: str) -> None:
    logger.debug("Cache hit", extra={"event_type": "cache_hit", "cache_key": key})


def log_cache_miss(logger: logging.Logger, key: str) -> None:
    logger.debug("Cache miss", extra={"event_type": "cache_miss", "cache_key": key})
