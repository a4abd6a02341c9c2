"""
Logging utilities for MCP Senado.
"""
