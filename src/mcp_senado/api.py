"""
FastAPI application for the MCP Senado HTTP transport.

Endpoints:
    GET  /                               Service information
    GET  /health                         Health check (never authenticated)
    POST /mcp                            MCP JSON-RPC endpoint
    GET  /sse, POST /sse                 MCP over Server-Sent Events
    GET  /api/tools                      Tool catalog
    GET  /api/tools/category/{category}  Tools of a category
    GET  /api/tools/{name}               Tool descriptor
    POST /api/tools/{name}               Invoke a tool with a JSON body
    GET  /api/categories                 Categories and their tool counts
"""

import asyncio
import hmac
import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from mcp_senado.core.errors import ConfigurationError
from mcp_senado.core.protocol import build_init_message, parse_error_response, process_mcp_request
from mcp_senado.services import ServiceFactory

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {"/health"}

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /health",
    "POST /mcp",
    "GET /sse",
    "POST /sse",
    "GET /api/tools",
    "GET /api/tools/{name}",
    "POST /api/tools/{name}",
    "GET /api/tools/category/{category}",
    "GET /api/categories",
]


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Current timestamp")
    tools: int = Field(..., description="Number of registered tools")
    categories: List[str] = Field(..., description="Tool categories")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error title")
    message: Optional[str] = Field(None, description="Error message")
    availableEndpoints: Optional[List[str]] = Field(None, description="Endpoints served by this API")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, error: str, message: Optional[str] = None, **extra: Any) -> JSONResponse:
    content = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def sse_event(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


async def _read_json(request: Request, empty: Any = None) -> Any:
    body = await request.body()
    if not body.strip():
        return empty
    return json.loads(body)


def create_app(factory: Optional[ServiceFactory] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        factory: Service factory providing the MCP server, a new one built
            from the global configuration by default

    Returns:
        FastAPI: The application.

    Raises:
        ConfigurationError: If authentication is enabled without a token
    """
    factory = factory or ServiceFactory()
    config = factory.config
    server = factory.initialize()

    if config.http.auth_enabled and not config.http.auth_token:
        raise ConfigurationError("HTTP authentication is enabled but HTTP_AUTH_TOKEN is not set")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown events."""
        logger.info(f"Starting {config.server.name} HTTP server...")
        await server.start()

        yield

        logger.info(f"Shutting down {config.server.name} HTTP server...")
        await factory.shutdown()

    app = FastAPI(
        title="MCP Senado",
        description="Model Context Protocol server for the Brazilian Federal Senate open data API",
        version=config.server.version,
        lifespan=lifespan,
    )
    app.state.factory = factory
    app.state.server = server

    # Middleware registered last runs first: logging wraps timeout wraps auth
    @app.middleware("http")
    async def authenticate(request: Request, call_next):
        """Require the bearer token on every route except the health check."""
        if not config.http.auth_enabled or request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(token.encode(), config.http.auth_token.encode()):
            logger.warning("Rejected unauthenticated request", extra={"path": request.url.path})
            return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Invalid or missing authentication token")

        return await call_next(request)

    @app.middleware("http")
    async def enforce_timeout(request: Request, call_next):
        """Abort requests whose response does not start in time."""
        try:
            return await asyncio.wait_for(call_next(request), timeout=config.http.request_timeout / 1000)
        except asyncio.TimeoutError:
            logger.error(f"Request timed out: {request.method} {request.url.path}")
            return _error(
                status.HTTP_504_GATEWAY_TIMEOUT,
                "Gateway Timeout",
                f"Request timed out after {config.http.request_timeout}ms",
            )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests."""
        start_time = time.time()

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response

    if config.http.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.http.cors_origin_list,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "Accept", "Cache-Control", "Last-Event-ID"],
            expose_headers=["Content-Type", "Cache-Control"],
        )

    @app.get("/")
    async def root():
        """Service information."""
        registry = server.registry
        return {
            "name": config.server.name,
            "status": "online",
            "description": "MCP server for the Brazilian Federal Senate open data API",
            "version": config.server.version,
            "environment": config.environment,
            "documentation": "/docs",
            "stats": {"toolCount": registry.count(), "categories": registry.get_categories()},
            "endpoints": AVAILABLE_ENDPOINTS,
            "timestamp": _now(),
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            timestamp=_now(),
            tools=server.registry.count(),
            categories=server.registry.get_categories(),
        )

    @app.post("/mcp")
    async def mcp_endpoint(request: Request):
        """MCP JSON-RPC endpoint."""
        try:
            payload = await _read_json(request)
        except ValueError as e:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=parse_error_response(str(e)))

        response = await process_mcp_request(payload, server)
        if response is None:
            return Response(status_code=status.HTTP_202_ACCEPTED)
        return JSONResponse(content=response)

    @app.api_route("/sse", methods=["GET", "POST"])
    async def sse_endpoint(request: Request):
        """
        MCP over Server-Sent Events.

        GET keeps the stream open with periodic pings until the connection
        timeout. POST answers the posted JSON-RPC request on the stream and
        closes it.
        """
        accept = request.headers.get("accept", "")
        if "text/event-stream" not in accept and "*/*" not in accept:
            return _error(status.HTTP_400_BAD_REQUEST, "Bad Request", "SSE requires Accept: text/event-stream")

        reply: Optional[Dict[str, Any]] = None
        if request.method == "POST":
            try:
                payload = await _read_json(request)
            except ValueError as e:
                return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=parse_error_response(str(e)))
            if payload is not None:
                reply = await process_mcp_request(payload, server)

        ping_interval = config.http.sse_ping_interval / 1000
        connection_timeout = config.http.sse_connection_timeout / 1000

        async def event_stream():
            """Generate Server-Sent Events stream."""
            yield sse_event(
                "connection",
                {"type": "connection", "status": "connected", "server": config.server.name, "timestamp": _now()},
            )
            yield sse_event("message", build_init_message(config))

            if request.method == "POST":
                if reply is not None:
                    yield sse_event("message", reply)
                return

            loop = asyncio.get_running_loop()
            deadline = loop.time() + connection_timeout
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(ping_interval, remaining))
                if await request.is_disconnected() or loop.time() >= deadline:
                    break
                yield sse_event("ping", {"type": "ping", "timestamp": _now()})

            logger.debug("SSE connection closed after timeout")

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
        )

    @app.get("/api/tools")
    async def list_tools():
        tools = server.list_tools()
        return {"tools": tools, "total": len(tools)}

    @app.get("/api/tools/category/{category}")
    async def list_tools_by_category(category: str):
        tools = [tool.describe() for tool in server.registry.get_by_category(category)]
        return {"category": category, "tools": tools, "total": len(tools)}

    @app.get("/api/tools/{name}")
    async def get_tool(name: str):
        tool = server.registry.get(name)
        if tool is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "Not Found", "message": f"Tool '{name}' not found"},
            )
        return tool.describe()

    @app.post("/api/tools/{name}")
    async def invoke_tool(name: str, request: Request):
        """Invoke a tool; the JSON body holds the tool arguments."""
        if not server.registry.has(name):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "Not Found", "message": f"Tool '{name}' not found"},
            )

        try:
            arguments = await _read_json(request, empty={})
        except ValueError:
            return _error(status.HTTP_400_BAD_REQUEST, "Bad Request", "Request body must be valid JSON")
        if not isinstance(arguments, dict):
            return _error(status.HTTP_400_BAD_REQUEST, "Bad Request", "Request body must be a JSON object")

        result = await server.call_tool(name, arguments)
        if result.is_error:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "Tool Execution Error", "result": result.to_wire()},
            )
        return {"success": True, "result": result.to_wire()}

    @app.get("/api/categories")
    async def list_categories():
        categories = [
            {"name": category, "toolCount": len(server.registry.get_by_category(category))}
            for category in server.registry.get_categories()
        ]
        return {"categories": categories, "total": len(categories)}

    # Error handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with structured error responses."""
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content=exc.detail)

        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return _error(
                exc.status_code,
                "Not Found",
                f"Endpoint {request.method} {request.url.path} not found",
                availableEndpoints=AVAILABLE_ENDPOINTS,
            )

        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions with structured error responses."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))

    return app
