"""
MCP Senado - Model Context Protocol server for the Brazilian Federal Senate

This package exposes the Senado Federal open-data API as MCP tools, served
over HTTP (FastAPI) and over stdio.

Modules:
    config: Pydantic settings and .mcprc.json loading
    core: Errors, validation, tool registry, MCP server and JSON-RPC protocol
    infrastructure: HTTP client, cache, circuit breaker and rate limiter
    tools: Tool definitions grouped by category
    utils: Logging helpers
    api: FastAPI application for the HTTP transport
    bin: Console entry points
"""

__version__ = "1.0.0"
