"""
Tool execution tracking with timing and structured logging.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .logging_utils import mask_sensitive_data

logger = logging.getLogger(__name__)


class ToolExecutionMetrics:
    """Timing and outcome of a single tool invocation."""

    def __init__(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None):
        self.tool_name = tool_name
        self.arguments = arguments or {}
        self.start_time: Optional[datetime] = None
        self.start_timestamp: Optional[float] = None
        self.duration_ms: Optional[float] = None
        self.success: Optional[bool] = None
        self.error: Optional[str] = None
        self.error_type: Optional[str] = None
        self.cached = False

    def start_execution(self) -> None:
        self.start_time = datetime.now(timezone.utc)
        self.start_timestamp = time.time()

    def end_execution(self, success: bool = True, error: Optional[str] = None, error_type: Optional[str] = None) -> None:
        self.duration_ms = round((time.time() - (self.start_timestamp or time.time())) * 1000, 2)
        self.success = success
        self.error = error
        self.error_type = error_type

        if success:
            logger.info(
                f"Tool invoked: {self.tool_name}",
                extra={
                    "event_type": "tool_invocation",
                    "tool": self.tool_name,
                    "arguments": mask_sensitive_data(self.arguments),
                    "duration_ms": self.duration_ms,
                    "cached": self.cached,
                },
            )
        else:
            logger.error(
                f"Tool failed: {self.tool_name} | {error_type}: {error}",
                extra={
                    "event_type": "tool_error",
                    "tool": self.tool_name,
                    "arguments": mask_sensitive_data(self.arguments),
                    "duration_ms": self.duration_ms,
                    "error_type": error_type,
                },
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "duration_ms": self.duration_ms,
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type,
            "cached": self.cached,
        }


@asynccontextmanager
async def track_tool_execution(tool_name: str, arguments: Optional[Dict[str, Any]] = None):
    """
    Async context manager timing a tool invocation.

    Usage:
        async with track_tool_execution("senador_detalhes", args) as metrics:
            cached = cache.get(key)
            metrics.cached = cached is not None
    """
    metrics = ToolExecutionMetrics(tool_name, arguments)
    metrics.start_execution()

    try:
        yield metrics
    except Exception as e:
        metrics.end_execution(success=False, error=str(e), error_type=type(e).__name__)
        raise

    metrics.end_execution(success=True)
