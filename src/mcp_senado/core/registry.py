"""
Central tool registry.

Holds every tool definition exposed through MCP, groups them by category
and dispatches invocations to the tool handlers.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from mcp_senado.tools.base import TOOL_CATEGORIES, ToolContext, ToolDefinition, ToolResult

from .errors import ToolNotFoundError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry mapping tool names to tool definitions.

    Args:
        context: Dependencies handed to every tool handler on invocation
    """

    def __init__(self, context: ToolContext):
        self.context = context
        self._tools: Dict[str, ToolDefinition] = {}

    @staticmethod
    def _validate_definition(tool: ToolDefinition) -> None:
        if not isinstance(tool.name, str) or not tool.name.strip():
            raise ValueError("Tool name must be a non-empty string")
        if not isinstance(tool.description, str) or not tool.description.strip():
            raise ValueError(f"Tool '{tool.name}' must have a description")
        if tool.category not in TOOL_CATEGORIES:
            raise ValueError(f"Tool '{tool.name}' has invalid category '{tool.category}'")
        if not (isinstance(tool.schema, type) and issubclass(tool.schema, BaseModel)):
            raise ValueError(f"Tool '{tool.name}' schema must be a pydantic model")
        if not callable(tool.handler):
            raise ValueError(f"Tool '{tool.name}' handler must be callable")

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If the definition is invalid or the name is taken
        """
        self._validate_definition(tool)
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name}", extra={"tool": tool.name, "category": tool.category})

    def register_many(self, tools: Iterable[ToolDefinition]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def get_all(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def get_by_category(self, category: str) -> List[ToolDefinition]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def get_categories(self) -> List[str]:
        """Categories with at least one tool, in registration order."""
        categories: List[str] = []
        for tool in self._tools.values():
            if tool.category not in categories:
                categories.append(tool.category)
        return categories

    def count(self) -> int:
        return len(self._tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        """MCP ``tools/list`` descriptors of every registered tool."""
        return [tool.describe() for tool in self._tools.values()]

    def clear(self) -> None:
        self._tools.clear()

    async def invoke(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Invoke a tool by name.

        Args:
            name: Tool name
            args: Raw tool arguments, validated by the tool itself

        Returns:
            The tool result

        Raises:
            ToolNotFoundError: If no tool is registered under ``name``
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return await tool.handler(args or {}, self.context)
