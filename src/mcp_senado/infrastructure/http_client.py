"""
HTTP client for the Senado Federal open-data API.

The API answers in XML by default and in JSON for some endpoints. Responses
are normalized into plain Python structures:

- JSON bodies are decoded as is
- XML bodies are converted to nested dicts (attributes prefixed with ``@_``,
  mixed text under ``#text``, repeated elements collected into lists)
- anything else is returned as ``{"text": body}``

Requests are retried with exponential backoff (tenacity) and the whole retry
loop runs behind the circuit breaker.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from xml.etree import ElementTree as ET

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from mcp_senado import __version__
from mcp_senado.core.errors import SenadoAPIError, is_retriable_error
from mcp_senado.infrastructure.circuit_breaker import NoOpCircuitBreaker

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/xml, application/json, text/xml, */*",
    "User-Agent": f"MCP-Senado/{__version__}",
}

_INT_RE = re.compile(r"^-?(0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^-?(0|[1-9]\d*)\.\d+$")


def _parse_scalar(text: str) -> Any:
    value = text.strip()
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return _parse_scalar(text) if text else ""

    node: Dict[str, Any] = {}
    for name, value in element.attrib.items():
        node[f"@_{_local_name(name)}"] = _parse_scalar(value)

    for child in children:
        key = _local_name(child.tag)
        value = _element_to_value(child)
        if key in node:
            if not isinstance(node[key], list):
                node[key] = [node[key]]
            node[key].append(value)
        else:
            node[key] = value

    if text:
        node["#text"] = _parse_scalar(text)
    return node


def parse_xml(text: str) -> Dict[str, Any]:
    """
    Convert an XML document into a dict keyed by the root element name.

    Raises:
        SenadoAPIError: If the document is not well-formed.
    """
    try:
        root = ET.fromstring(text.strip())
    except ET.ParseError as e:
        raise SenadoAPIError(f"Invalid XML response: {e}", 502) from e
    return {_local_name(root.tag): _element_to_value(root)}


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SenadoHttpClient:
    """
    Async client for the Senate open-data API.

    Args:
        api_config: ``SenadoAPIConfig`` with base URL, timeout and retry settings
        circuit_breaker: Breaker wrapping every request, pass-through by default
        session: Optional pre-built ``aiohttp.ClientSession``
    """

    def __init__(self, api_config, circuit_breaker=None, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = api_config.base_url if api_config.base_url.endswith("/") else f"{api_config.base_url}/"
        self.timeout = api_config.timeout
        self.max_retries = api_config.max_retries
        self.retry_delay = api_config.retry_delay
        self.circuit_breaker = circuit_breaker or NoOpCircuitBreaker()
        self.session = session

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=DEFAULT_HEADERS)
        return self.session

    async def close(self) -> None:
        """Close the session."""
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def __aenter__(self) -> "SenadoHttpClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def build_url(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Join ``endpoint`` to the base URL and append non-null ``params``."""
        url = self.base_url + endpoint.lstrip("/")
        query = {key: _query_value(value) for key, value in (params or {}).items() if value is not None}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET an API endpoint.

        Args:
            endpoint: Path relative to the API base URL, e.g. ``/senador/lista/atual``
            params: Query parameters, ``None`` values are skipped

        Returns:
            Parsed response body

        Raises:
            SenadoAPIError: On HTTP errors, timeouts or transport failures
            CircuitBreakerError: If the circuit is open
        """
        url = self.build_url(endpoint, params)
        return await self.circuit_breaker.execute(lambda: self._get_with_retry(url))

    async def _get_with_retry(self, url: str) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay / 1000, exp_base=2),
            retry=retry_if_exception(is_retriable_error),
            before_sleep=self._log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._request(url)

    @staticmethod
    def _log_retry(retry_state) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Retrying Senate API request (attempt {retry_state.attempt_number}): {error}",
            extra={"event_type": "http_retry", "attempt": retry_state.attempt_number},
        )

    async def _request(self, url: str) -> Any:
        session = await self._ensure_session()
        start_time = time.time()
        logger.debug("HTTP request", extra={"method": "GET", "url": url})

        try:
            async with session.get(
                url,
                headers=DEFAULT_HEADERS,
                timeout=aiohttp.ClientTimeout(total=self.timeout / 1000),
            ) as response:
                data = await self._parse_response(response)
                duration_ms = (time.time() - start_time) * 1000
                logger.debug(
                    "HTTP response",
                    extra={"url": url, "status": response.status, "duration_ms": round(duration_ms, 2)},
                )
                if response.status >= 400:
                    raise SenadoAPIError(f"HTTP {response.status}: {response.reason}", response.status, url, data)
                return data
        except SenadoAPIError:
            raise
        except asyncio.TimeoutError as e:
            raise SenadoAPIError(f"Request timeout after {self.timeout}ms", 408, url) from e
        except aiohttp.ClientError as e:
            raise SenadoAPIError(f"Request failed: {e}", 500, url) from e

    @staticmethod
    async def _parse_response(response) -> Any:
        content_type = response.headers.get("Content-Type", "").lower()
        text = await response.text()

        if "application/json" in content_type:
            try:
                return json.loads(text) if text.strip() else {}
            except ValueError:
                return {"text": text}

        if "xml" in content_type or text.lstrip().startswith("<?xml"):
            try:
                return parse_xml(text)
            except SenadoAPIError as e:
                logger.warning(f"Could not parse XML response: {e.message}")
                return {"text": text}

        return {"text": text}
