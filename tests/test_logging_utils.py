"""
Tests for structured logging, PII masking and tool execution tracking.
"""

import io
import json
import logging

import pytest

from mcp_senado.config.settings import LoggingConfig
from mcp_senado.utils.execution_logger import ToolExecutionMetrics, track_tool_execution
from mcp_senado.utils.logging_utils import (
    REDACTED,
    configure_logging,
    is_sensitive_key,
    mask_email,
    mask_phone,
    mask_sensitive_data,
)


class TestMasking:
    """PII masking helpers."""

    def test_mask_email(self):
        assert mask_email("fulano@senado.leg.br") == "f***o@senado.leg.br"
        assert mask_email("ab@senado.leg.br") == "***@senado.leg.br"

    def test_mask_phone(self):
        assert mask_phone("(61) 3303-4141") == "61****41"
        assert mask_phone("1234-567") == REDACTED

    @pytest.mark.parametrize("key", ["email", "userEmail", "TOKEN", "api_key", "Authorization", "senha", "cpf"])
    def test_sensitive_keys(self, key):
        assert is_sensitive_key(key) is True

    def test_regular_keys(self):
        assert is_sensitive_key("codigo") is False

    def test_mask_sensitive_data(self):
        data = {
            "email": "fulano@senado.leg.br",
            "token": "abc",
            "nested": {"contato": "fulano@senado.leg.br", "codigo": 5012},
            "contatos": ["(61) 3303-4141", "SP"],
        }

        assert mask_sensitive_data(data) == {
            "email": REDACTED,
            "token": REDACTED,
            "nested": {"contato": "f***o@senado.leg.br", "codigo": 5012},
            "contatos": ["61****41", "SP"],
        }

    def test_original_is_not_modified(self):
        data = {"token": "abc"}

        mask_sensitive_data(data)

        assert data == {"token": "abc"}


class TestConfigureLogging:
    """Root logger configuration."""

    def test_json_output(self):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="INFO", format="json"), service="mcp-senado-test", stream=stream)

        logging.getLogger("mcp_senado.test").info("hello", extra={"codigo": 5012})

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "mcp_senado.test"
        assert record["service"] == "mcp-senado-test"
        assert record["codigo"] == 5012
        assert "timestamp" in record

    def test_pii_is_masked_in_extra_fields(self):
        stream = io.StringIO()
        configure_logging(LoggingConfig(format="json", mask_pii=True), stream=stream)

        logging.getLogger("mcp_senado.test").info(
            "contact", extra={"email": "fulano@senado.leg.br", "contato": "fulano@senado.leg.br"}
        )

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["email"] == REDACTED
        assert record["contato"] == "f***o@senado.leg.br"

    def test_masking_can_be_disabled(self):
        stream = io.StringIO()
        configure_logging(LoggingConfig(format="json", mask_pii=False), stream=stream)

        logging.getLogger("mcp_senado.test").info("contact", extra={"email": "fulano@senado.leg.br"})

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["email"] == "fulano@senado.leg.br"

    def test_text_output_and_level(self):
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="WARNING", format="text"), stream=stream)
        logger = logging.getLogger("mcp_senado.test")

        logger.info("hidden")
        logger.warning("visible")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "[WARNING] mcp_senado.test: visible" in output

    def test_replaces_existing_handlers(self):
        configure_logging(LoggingConfig(), stream=io.StringIO())
        configure_logging(LoggingConfig(), stream=io.StringIO())

        assert len(logging.getLogger().handlers) == 1


class TestToolExecutionTracking:
    """track_tool_execution context manager."""

    @pytest.mark.asyncio
    async def test_successful_execution(self):
        async with track_tool_execution("senador_detalhes", {"codigo": 5012}) as metrics:
            metrics.cached = True

        assert metrics.success is True
        assert metrics.duration_ms is not None
        assert metrics.to_dict()["cached"] is True
        assert metrics.to_dict()["tool_name"] == "senador_detalhes"

    @pytest.mark.asyncio
    async def test_failed_execution_is_reraised(self):
        with pytest.raises(ValueError):
            async with track_tool_execution("senador_detalhes") as metrics:
                raise ValueError("bad")

        assert metrics.success is False
        assert metrics.error == "bad"
        assert metrics.error_type == "ValueError"

    def test_metrics_before_start(self):
        metrics = ToolExecutionMetrics("x")

        assert metrics.to_dict()["start_time"] is None
