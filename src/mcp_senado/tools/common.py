"""
Helpers shared by the tool modules.

The Senate API wraps lists in several levels of envelope objects and returns
a single object instead of a one-element list. ``normalize_array`` and
``get_nested_value`` smooth that over; ``paginate_items`` applies the
``pagina``/``itens`` arguments to lists the API does not paginate itself.
"""

import json
import logging
from string import Formatter
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from mcp_senado.core.validation import ToolParams, validate_tool_input

from .base import ToolCategory, ToolContext, ToolDefinition, ToolResult

logger = logging.getLogger(__name__)


def normalize_array(value: Any) -> List[Any]:
    """Wrap single values in a list; ``None`` becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def get_nested_value(data: Any, path: Iterable[str]) -> Any:
    """Follow ``path`` through nested dicts, returning ``None`` when a key is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def first_value(record: Any, *keys: str) -> Any:
    """First non-empty value of ``keys`` in ``record``."""
    if not isinstance(record, dict):
        return None
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def paginate_items(items: List[Any], pagina: Optional[int] = None, itens: Optional[int] = None) -> Tuple[List[Any], int]:
    """
    Slice ``items`` for the requested page.

    Args:
        items: Full list
        pagina: 1-based page number, defaults to 1
        itens: Page size, defaults to the whole list

    Returns:
        Page items and the total item count
    """
    total = len(items)
    page = max(pagina or 1, 1)
    size = max(itens or total or 1, 1)
    start = (page - 1) * size
    return items[start:start + size], total


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def format_result(title: str, data: Any) -> ToolResult:
    """Standard tool output: a title line followed by the JSON payload."""
    return ToolResult.text(f"{title}\n\n{to_json(data)}")


def path_fields(endpoint: str) -> List[str]:
    """Names of the ``{placeholders}`` in an endpoint template."""
    return [field for _, field, _, _ in Formatter().parse(endpoint) if field]


def endpoint_tool(
    name: str,
    description: str,
    category: ToolCategory,
    schema: Type[ToolParams],
    endpoint: str,
    title: str,
) -> ToolDefinition:
    """
    Build a tool that forwards its arguments to a single API endpoint.

    Arguments named in the endpoint template (``/senador/{codigo}``) fill the
    path; the remaining ones are sent as query parameters.

    Args:
        name: Tool name
        description: Tool description
        category: Tool category
        schema: Argument model
        endpoint: Endpoint template relative to the API base URL
        title: First line of the result text

    Returns:
        ToolDefinition: The tool.
    """
    in_path = tuple(path_fields(endpoint))

    async def handler(args: Dict[str, Any], context: ToolContext) -> ToolResult:
        params = validate_tool_input(schema, args, name)
        path = endpoint.format(**params.model_dump())
        query = params.to_query(exclude=in_path)
        logger.debug(f"{name}: GET {path}", extra={"tool": name, "endpoint": path, "params": query})

        try:
            data = await context.http_client.get(path, query)
        except Exception as e:
            logger.error(f"{name} failed: {e}", extra={"tool": name, "endpoint": path})
            raise

        return format_result(title, data)

    handler.__name__ = f"{name}_handler"
    return ToolDefinition(name=name, description=description, category=category, schema=schema, handler=handler)


def find_nested(data: Any, *paths: Iterable[str]) -> Any:
    """Value at the first of ``paths`` present in ``data``, or ``data`` itself."""
    for path in paths:
        value = get_nested_value(data, path)
        if value is not None:
            return value
    return data


def matches_filter(value: Any, term: Optional[str]) -> bool:
    """Case-insensitive substring match; an empty term matches everything."""
    if not term:
        return True
    return term.lower() in str(value or "").lower()


def as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
