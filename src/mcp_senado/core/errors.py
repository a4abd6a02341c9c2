"""
Error taxonomy for the MCP Senado server.

Every error raised by the server derives from MCPSenadoError and carries a
machine readable code. Tool failures are never propagated to MCP clients as
exceptions: they are converted into error tool results by
``error_to_tool_result``, which adds a suggestion (in Portuguese) tailored to
the error type.
"""

import json
import math
import time
import traceback
from typing import Any, Dict, Optional

from mcp_senado.tools.base import ToolResult


class MCPSenadoError(Exception):
    """Base class for all MCP Senado errors."""

    def __init__(self, message: str, code: str = "MCP_SENADO_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "code": self.code, "message": self.message}


class SenadoAPIError(MCPSenadoError):
    """The Senate open-data API answered with an error or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message, "SENADO_API_ERROR")
        self.status_code = status_code
        self.endpoint = endpoint
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"status_code": self.status_code, "endpoint": self.endpoint, "details": self.details})
        return data


class ValidationError(MCPSenadoError):
    """Tool arguments failed validation."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"field": self.field, "value": self.value})
        return data


class RateLimitError(MCPSenadoError):
    """The token bucket is empty. ``retry_after`` is in milliseconds."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message, "RATE_LIMIT_ERROR")
        self.retry_after = retry_after

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class CircuitBreakerError(MCPSenadoError):
    """The circuit breaker is open. ``last_failure_time`` is a unix timestamp."""

    def __init__(self, message: str, last_failure_time: Optional[float] = None):
        super().__init__(message, "CIRCUIT_BREAKER_ERROR")
        self.last_failure_time = last_failure_time

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["last_failure_time"] = self.last_failure_time
        return data


class ToolNotFoundError(MCPSenadoError):
    def __init__(self, tool_name: str):
        super().__init__(f"Tool not found: {tool_name}", "TOOL_NOT_FOUND")
        self.tool_name = tool_name

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["tool_name"] = self.tool_name
        return data


class ConfigurationError(MCPSenadoError):
    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class ResourceNotFoundError(MCPSenadoError):
    """A looked-up entity (committee, party) is absent from the API listing."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message, "RESOURCE_NOT_FOUND")
        self.resource = resource


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _format_api_error(error: SenadoAPIError) -> str:
    text = f"API Error ({error.status_code}): {error.message}\nEndpoint: {error.endpoint}\n"
    if error.details:
        text += f"\nDetails:\n{_to_json(error.details)}"

    status = error.status_code or 0
    if status == 404:
        text += "\n\nSuggestion: Verifique se o código/ID fornecido está correto."
    elif status == 429:
        text += "\n\nSuggestion: Aguarde alguns segundos antes de tentar novamente."
    elif status >= 500:
        text += (
            "\n\nSuggestion: O servidor do Senado pode estar temporariamente indisponível. "
            "Tente novamente em alguns minutos."
        )
    return text


def _format_circuit_breaker_error(error: CircuitBreakerError) -> str:
    text = f"Circuit Breaker Error: {error.message}\n"
    if error.last_failure_time:
        elapsed = max(0, round(time.time() - error.last_failure_time))
        text += f"Last failure: {elapsed} seconds ago\n"
    text += (
        "\nSuggestion: O sistema está temporariamente indisponível devido a múltiplas falhas. "
        "Aguarde alguns segundos."
    )
    return text


def format_error(error: BaseException, include_traceback: bool = False) -> str:
    """
    Render an exception as the text of an error tool result.

    Args:
        error: Exception raised while executing a tool
        include_traceback: Append the Python traceback for unexpected errors

    Returns:
        Human readable error message with a suggestion
    """
    if isinstance(error, SenadoAPIError):
        return _format_api_error(error)

    if isinstance(error, ValidationError):
        return (
            f"Validation Error: {error.message}\n"
            f"Field: {error.field}\n"
            f"Value: {_to_json(error.value)}\n\n"
            "Suggestion: Verifique se os parâmetros fornecidos estão no formato correto."
        )

    if isinstance(error, RateLimitError):
        retry_seconds = math.ceil((error.retry_after or 0) / 1000)
        return (
            f"Rate Limit Error: {error.message}\n"
            f"Retry after: {retry_seconds} seconds\n\n"
            "Suggestion: Aguarde alguns segundos antes de fazer novas requisições."
        )

    if isinstance(error, CircuitBreakerError):
        return _format_circuit_breaker_error(error)

    if isinstance(error, ToolNotFoundError):
        return (
            f"Tool Not Found: {error.tool_name}\n\n"
            "Suggestion: Verifique se o nome da ferramenta está correto. "
            'Use a ferramenta "tools/list" para ver todas as ferramentas disponíveis.'
        )

    if isinstance(error, ResourceNotFoundError):
        return (
            f"Not Found: {error.message}\n\n"
            "Suggestion: Verifique se o código/ID fornecido está correto."
        )

    if isinstance(error, ConfigurationError):
        return (
            f"Configuration Error: {error.message}\n\n"
            "Suggestion: Verifique as variáveis de ambiente e o arquivo .mcprc.json."
        )

    if isinstance(error, Exception):
        text = f"Error: {error}\n"
        if include_traceback:
            text += "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return text

    return f"Unknown error: {error}"


def error_to_tool_result(error: BaseException, include_traceback: bool = False) -> ToolResult:
    """Convert an exception into an MCP error tool result."""
    return ToolResult.text(format_error(error, include_traceback), is_error=True)


_RETRIABLE_MESSAGE_MARKERS = ("network", "timeout", "econnreset", "econnrefused", "connection reset", "connection refused")


def is_retriable_error(error: BaseException) -> bool:
    """
    Decide whether a failed Senate API request may be retried.

    Server errors (5xx), throttling (429) and timeouts (408) are retried.
    Open circuits and validation errors never are.
    """
    if isinstance(error, SenadoAPIError):
        status = error.status_code or 0
        return status >= 500 or status in (408, 429)

    if isinstance(error, (CircuitBreakerError, ValidationError)):
        return False

    message = str(error).lower()
    return any(marker in message for marker in _RETRIABLE_MESSAGE_MARKERS)
