#!/usr/bin/env python3
"""
Post-deploy smoke test for the MCP Senado HTTP server.

Checks the health endpoint and invokes a few tools through the REST API,
stopping at the first failure. A check fails on a non-2xx status or on an
error payload.

Run with:
    SMOKE_BASE_URL=http://localhost:3000 python scripts/smoke_test.py

Set SMOKE_AUTH_TOKEN when the server has bearer authentication enabled.
"""

import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

logger = logging.getLogger("smoke_test")

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 30


@dataclass
class SmokeCheck:
    name: str
    path: str
    method: str = "POST"
    body: Dict[str, Any] = field(default_factory=dict)


SMOKE_CHECKS: List[SmokeCheck] = [
    SmokeCheck("health", "/health", method="GET"),
    SmokeCheck("ufs_listar", "/api/tools/ufs_listar"),
    SmokeCheck("senadores_SP", "/api/tools/senadores_listar", body={"uf": "SP"}),
    SmokeCheck("materias_pl", "/api/tools/materias_pesquisar", body={"sigla": "PL", "ano": 2024, "itens": 2}),
    SmokeCheck("comissoes", "/api/tools/comissoes_listar", body={"itens": 2}),
    SmokeCheck("votacoes", "/api/tools/votacoes_listar", body={"data": "2023-12-12", "itens": 1}),
]


class SmokeTestError(Exception):
    """A smoke check failed."""


def is_error_payload(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if payload.get("error") or payload.get("isError"):
        return True
    result = payload.get("result")
    return isinstance(result, dict) and bool(result.get("isError"))


async def run_check(session: aiohttp.ClientSession, base_url: str, check: SmokeCheck) -> Any:
    """
    Run one check.

    Returns:
        The decoded JSON response

    Raises:
        SmokeTestError: If the status is not 2xx or the payload reports an error
    """
    url = base_url.rstrip("/") + check.path
    options = {"json": check.body} if check.method == "POST" else {}

    async with session.request(check.method, url, **options) as response:
        text = await response.text()
        if not 200 <= response.status < 300:
            raise SmokeTestError(f'Check "{check.name}" failed with status {response.status}: {text}')

    try:
        payload = json.loads(text)
    except ValueError as e:
        raise SmokeTestError(f'Check "{check.name}" returned invalid JSON: {text}') from e

    if is_error_payload(payload):
        raise SmokeTestError(
            f'Check "{check.name}" returned error payload: {json.dumps(payload, ensure_ascii=False)}'
        )

    logger.info(f"✔ {check.name}")
    return payload


async def run_smoke_tests(
    base_url: str,
    checks: Sequence[SmokeCheck] = SMOKE_CHECKS,
    auth_token: Optional[str] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> List[Any]:
    """Run the checks in order against ``base_url``."""
    headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}
    results = []
    async with aiohttp.ClientSession(headers=headers, timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        for check in checks:
            results.append(await run_check(session, base_url, check))
    return results


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    base_url = os.getenv("SMOKE_BASE_URL", DEFAULT_BASE_URL)
    auth_token = os.getenv("SMOKE_AUTH_TOKEN")

    try:
        asyncio.run(run_smoke_tests(base_url, auth_token=auth_token))
    except (SmokeTestError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Smoke tests failed: {e}")
        sys.exit(1)

    logger.info(f"All smoke tests passed against {base_url}")


if __name__ == "__main__":
    main()
