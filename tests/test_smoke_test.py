"""
Tests for the post-deploy smoke test script.
"""

import importlib.util
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from aiohttp import test_utils, web

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "smoke_test.py"

_spec = importlib.util.spec_from_file_location("smoke_test", SCRIPT)
smoke_test = importlib.util.module_from_spec(_spec)
sys.modules[_spec.name] = smoke_test
_spec.loader.exec_module(smoke_test)


def make_app(calls, tool_status=200, tool_payload=None):
    """Minimal stand-in for the deployed REST API."""

    async def health(request):
        calls.append(("health", None, request.headers.get("Authorization")))
        return web.json_response({"status": "healthy", "tools": 43})

    async def invoke(request):
        calls.append((request.match_info["name"], await request.json(), request.headers.get("Authorization")))
        payload = tool_payload or {"success": True, "result": {"content": [], "isError": False}}
        return web.json_response(payload, status=tool_status)

    app = web.Application()
    app.router.add_get("/health", health)
    app.router.add_post("/api/tools/{name}", invoke)
    return app


def base_url(server: test_utils.TestServer) -> str:
    return str(server.make_url("/")).rstrip("/")


class TestRunSmokeTests:
    """Checks run in order against a live HTTP server."""

    @pytest.mark.asyncio
    async def test_all_checks_pass(self):
        calls = []
        async with test_utils.TestServer(make_app(calls)) as server:
            results = await smoke_test.run_smoke_tests(base_url(server))

        assert len(results) == len(smoke_test.SMOKE_CHECKS)
        assert [call[0] for call in calls] == [
            "health",
            "ufs_listar",
            "senadores_listar",
            "materias_pesquisar",
            "comissoes_listar",
            "votacoes_listar",
        ]
        assert calls[2][1] == {"uf": "SP"}
        assert calls[5][1] == {"data": "2023-12-12", "itens": 1}

    @pytest.mark.asyncio
    async def test_stops_at_first_failing_status(self):
        calls = []
        async with test_utils.TestServer(make_app(calls, tool_status=500, tool_payload={"error": "boom"})) as server:
            with pytest.raises(smoke_test.SmokeTestError, match='Check "ufs_listar" failed with status 500'):
                await smoke_test.run_smoke_tests(base_url(server))

        assert [call[0] for call in calls] == ["health", "ufs_listar"]

    @pytest.mark.asyncio
    async def test_error_payload_fails(self):
        calls = []
        payload = {"success": True, "result": {"content": [], "isError": True}}
        async with test_utils.TestServer(make_app(calls, tool_payload=payload)) as server:
            with pytest.raises(smoke_test.SmokeTestError, match="returned error payload"):
                await smoke_test.run_smoke_tests(base_url(server))

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self):
        calls = []
        async with test_utils.TestServer(make_app(calls)) as server:
            await smoke_test.run_smoke_tests(base_url(server), checks=smoke_test.SMOKE_CHECKS[:2], auth_token="secret")

        assert [call[2] for call in calls] == ["Bearer secret", "Bearer secret"]

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"status": "healthy"}, False),
            ({"error": "Not Found"}, True),
            ({"isError": True}, True),
            ({"success": True, "result": {"isError": True}}, True),
            ([1, 2], False),
        ],
    )
    def test_is_error_payload(self, payload, expected):
        assert smoke_test.is_error_payload(payload) is expected


class TestMain:
    def test_exits_on_failure(self, monkeypatch):
        monkeypatch.delenv("SMOKE_AUTH_TOKEN", raising=False)
        monkeypatch.setenv("SMOKE_BASE_URL", "http://smoke.invalid")
        failing = AsyncMock(side_effect=smoke_test.SmokeTestError("Check \"health\" failed"))

        with patch.object(smoke_test, "run_smoke_tests", failing):
            with pytest.raises(SystemExit) as exc_info:
                smoke_test.main()

        assert exc_info.value.code == 1
        failing.assert_awaited_once_with("http://smoke.invalid", auth_token=None)

    def test_success(self, monkeypatch):
        monkeypatch.delenv("SMOKE_BASE_URL", raising=False)
        monkeypatch.setenv("SMOKE_AUTH_TOKEN", "secret")
        passing = AsyncMock(return_value=[])

        with patch.object(smoke_test, "run_smoke_tests", passing):
            smoke_test.main()

        passing.assert_awaited_once_with(smoke_test.DEFAULT_BASE_URL, auth_token="secret")
