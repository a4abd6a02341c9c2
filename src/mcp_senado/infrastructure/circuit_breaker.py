"""
Circuit breaker protecting the Senate API from request storms while it is
failing.

States:
    CLOSED: requests flow, consecutive failures are counted
    OPEN: requests fail fast until the timeout elapses
    HALF_OPEN: trial requests; enough successes close the circuit, any
        failure opens it again
"""

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from mcp_senado.core.errors import CircuitBreakerError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    Args:
        failure_threshold: Failures in CLOSED state before opening
        success_threshold: Successes in HALF_OPEN state before closing
        timeout: Milliseconds an open circuit waits before half-opening
        clock: Wall clock in seconds, injectable for tests
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        timeout: int = 60000,
        clock: Callable[[], float] = time.time,
    ):
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.timeout = timeout
        self._clock = clock
        self.state = CircuitState.CLOSED
        self.failures = 0
        self.successes = 0
        self.last_failure_time: Optional[float] = None

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` through the breaker.

        Raises:
            CircuitBreakerError: If the circuit is open.
        """
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._transition_to(CircuitState.HALF_OPEN)
            else:
                raise CircuitBreakerError("Circuit breaker is OPEN", self.last_failure_time)

        try:
            result = await operation()
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return (self._clock() - self.last_failure_time) * 1000 >= self.timeout

    def _on_success(self) -> None:
        self.failures = 0
        if self.state == CircuitState.HALF_OPEN:
            self.successes += 1
            if self.successes >= self.success_threshold:
                self._transition_to(CircuitState.CLOSED)

    def _on_failure(self) -> None:
        self.failures += 1
        self.last_failure_time = self._clock()
        self.successes = 0

        if self.state == CircuitState.HALF_OPEN:
            self._transition_to(CircuitState.OPEN)
        elif self.state == CircuitState.CLOSED and self.failures >= self.failure_threshold:
            self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        old_state = self.state
        self.state = new_state

        if new_state == CircuitState.CLOSED:
            self.failures = 0
            self.successes = 0
        elif new_state == CircuitState.HALF_OPEN:
            self.successes = 0

        logger.warning(
            f"Circuit breaker {old_state.value} -> {new_state.value}",
            extra={"event_type": "circuit_breaker_transition", "from_state": old_state.value, "to_state": new_state.value},
        )

    def get_state(self) -> CircuitState:
        return self.state

    def get_stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "failures": self.failures,
            "successes": self.successes,
            "last_failure_time": self.last_failure_time,
        }

    def reset(self) -> None:
        self.state = CircuitState.CLOSED
        self.failures = 0
        self.successes = 0
        self.last_failure_time = None


class NoOpCircuitBreaker:
    """Pass-through breaker used when the circuit breaker is disabled."""

    state = CircuitState.CLOSED

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await operation()

    def get_state(self) -> CircuitState:
        return CircuitState.CLOSED

    def get_stats(self) -> Dict[str, Any]:
        return {"state": CircuitState.CLOSED.value, "failures": 0, "successes": 0, "last_failure_time": None}

    def reset(self) -> None:
        return None


def create_circuit_breaker(breaker_config) -> Any:
    """Build the circuit breaker described by a ``CircuitBreakerConfig``."""
    if not breaker_config.enabled:
        return NoOpCircuitBreaker()
    return CircuitBreaker(
        failure_threshold=breaker_config.failure_threshold,
        success_threshold=breaker_config.success_threshold,
        timeout=breaker_config.timeout,
    )
