"""
MCP JSON-RPC 2.0 message handling shared by the HTTP, SSE and stdio
transports.
"""

import logging
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[str, int, None]


def success_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def parse_error_response(detail: Optional[str] = None) -> Dict[str, Any]:
    return error_response(None, PARSE_ERROR, "Parse error", detail)


def server_info(config) -> Dict[str, Any]:
    return {
        "protocolVersion": MCP_PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": config.server.name, "version": config.server.version},
    }


def build_init_message(config) -> Dict[str, Any]:
    """Initialization message pushed to SSE clients on connect."""
    return success_response("init", server_info(config))


async def process_mcp_request(payload: Any, server) -> Optional[Dict[str, Any]]:
    """
    Handle one JSON-RPC message.

    Args:
        payload: Decoded JSON-RPC request
        server: ``SenadoMCPServer`` answering the request

    Returns:
        The JSON-RPC response, or ``None`` for notifications
    """
    if not isinstance(payload, dict) or payload.get("jsonrpc") != JSONRPC_VERSION or not isinstance(
        payload.get("method"), str
    ):
        request_id = payload.get("id") if isinstance(payload, dict) else None
        return error_response(request_id, INVALID_REQUEST, "Invalid Request")

    request_id = payload.get("id")
    method = payload["method"]
    params = payload.get("params")

    if method.startswith("notifications/"):
        logger.debug(f"Notification received: {method}")
        return None

    if method == "initialize":
        return success_response(request_id, server_info(server.config))

    if method == "ping":
        return success_response(request_id, {})

    if method == "tools/list":
        return success_response(request_id, {"tools": server.list_tools()})

    if method == "tools/call":
        if not isinstance(params, dict):
            return error_response(request_id, INVALID_PARAMS, "Invalid params", "Expected object with name and arguments")

        name = params.get("name")
        if not isinstance(name, str) or not name:
            return error_response(request_id, INVALID_PARAMS, "Invalid params", "Tool name is required")

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return error_response(request_id, INVALID_PARAMS, "Invalid params", "Tool arguments must be an object")

        try:
            result = await server.call_tool(name, arguments)
        except Exception as e:
            logger.error(f"Tool execution failed: {name}: {e}")
            return error_response(request_id, INTERNAL_ERROR, "Tool execution failed", str(e))
        return success_response(request_id, result.to_wire())

    return error_response(request_id, METHOD_NOT_FOUND, "Method not found", f"Unknown method: {method}")
