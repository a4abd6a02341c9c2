"""
Tests for the circuit breaker state machine.
"""

from unittest.mock import AsyncMock

import pytest

from mcp_senado.config.settings import CircuitBreakerConfig
from mcp_senado.core.errors import CircuitBreakerError
from mcp_senado.infrastructure.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    NoOpCircuitBreaker,
    create_circuit_breaker,
)


async def fail():
    raise RuntimeError("upstream failure")


async def succeed():
    return "ok"


async def trip(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        with pytest.raises(RuntimeError):
            await breaker.execute(fail)


class TestCircuitBreaker:
    """State transitions."""

    @pytest.mark.asyncio
    async def test_passes_results_through(self, clock):
        breaker = CircuitBreaker(clock=clock)

        assert await breaker.execute(succeed) == "ok"
        assert breaker.get_state() == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_opens_after_failure_threshold(self, clock):
        breaker = CircuitBreaker(failure_threshold=3, clock=clock)

        await trip(breaker, 2)
        assert breaker.get_state() == CircuitState.CLOSED

        await trip(breaker, 1)
        assert breaker.get_state() == CircuitState.OPEN
        assert breaker.last_failure_time == clock.now

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, timeout=1000, clock=clock)
        await trip(breaker, 1)
        operation = AsyncMock(return_value="ok")

        with pytest.raises(CircuitBreakerError) as exc_info:
            await breaker.execute(operation)

        operation.assert_not_awaited()
        assert exc_info.value.message == "Circuit breaker is OPEN"
        assert exc_info.value.last_failure_time == clock.now

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self, clock):
        breaker = CircuitBreaker(failure_threshold=2, clock=clock)

        await trip(breaker, 1)
        await breaker.execute(succeed)
        await trip(breaker, 1)

        assert breaker.get_state() == CircuitState.CLOSED
        assert breaker.failures == 1

    @pytest.mark.asyncio
    async def test_half_open_closes_after_successes(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, success_threshold=2, timeout=1000, clock=clock)
        await trip(breaker, 1)

        clock.advance(1)
        await breaker.execute(succeed)
        assert breaker.get_state() == CircuitState.HALF_OPEN

        await breaker.execute(succeed)
        assert breaker.get_state() == CircuitState.CLOSED
        assert breaker.get_stats()["failures"] == 0

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, success_threshold=2, timeout=1000, clock=clock)
        await trip(breaker, 1)

        clock.advance(1)
        await trip(breaker, 1)

        assert breaker.get_state() == CircuitState.OPEN
        with pytest.raises(CircuitBreakerError):
            await breaker.execute(succeed)

    @pytest.mark.asyncio
    async def test_reset(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, clock=clock)
        await trip(breaker, 1)

        breaker.reset()

        assert breaker.get_stats() == {
            "state": "CLOSED",
            "failures": 0,
            "successes": 0,
            "last_failure_time": None,
        }


class TestCreateCircuitBreaker:
    def test_enabled(self):
        breaker = create_circuit_breaker(CircuitBreakerConfig(failure_threshold=7, timeout=500))

        assert isinstance(breaker, CircuitBreaker)
        assert breaker.failure_threshold == 7
        assert breaker.timeout == 500

    @pytest.mark.asyncio
    async def test_disabled(self):
        breaker = create_circuit_breaker(CircuitBreakerConfig(enabled=False))

        assert isinstance(breaker, NoOpCircuitBreaker)
        for _ in range(10):
            with pytest.raises(RuntimeError):
                await breaker.execute(fail)
        assert await breaker.execute(succeed) == "ok"
