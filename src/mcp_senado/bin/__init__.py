"""
Console entry points: ``mcp-senado`` (stdio) and ``mcp-senado-http``.
"""
