"""
Base types shared by every Senate tool.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

ToolCategory = Literal["senator", "proposal", "voting", "committee", "party", "reference", "session"]

TOOL_CATEGORIES: List[str] = ["senator", "proposal", "voting", "committee", "party", "reference", "session"]


class TextContent(BaseModel):
    """Single text block of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """
    Standardized result format for all tools.

    Serialized with ``by_alias=True`` so the MCP wire format uses ``isError``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent] = Field(default_factory=list)
    is_error: bool = Field(False, alias="isError")

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class ToolContext:
    """Dependencies handed to every tool handler."""

    http_client: Any
    cache: Any = None
    config: Any = None


ToolHandler = Callable[[Dict[str, Any], ToolContext], Awaitable[ToolResult]]


@dataclass
class ToolDefinition:
    """
    A tool exposed through MCP.

    Attributes:
        name: Unique tool identifier (snake_case, Portuguese)
        description: Human readable description shown to MCP clients
        category: Tool category used for grouping and the REST API
        schema: Pydantic model used to validate the tool arguments
        handler: Coroutine executing the tool
    """

    name: str
    description: str
    category: ToolCategory
    schema: Type[BaseModel]
    handler: ToolHandler
    _input_schema: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def input_schema(self) -> Dict[str, Any]:
        if self._input_schema is None:
            from mcp_senado.core.validation import model_to_json_schema

            self._input_schema = model_to_json_schema(self.schema)
        return self._input_schema

    def describe(self) -> Dict[str, Any]:
        """MCP ``tools/list`` descriptor."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "category": self.category,
        }
