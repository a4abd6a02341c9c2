"""
Core MCP building blocks: errors, validation, tool registry, server and
JSON-RPC protocol handling.
"""
