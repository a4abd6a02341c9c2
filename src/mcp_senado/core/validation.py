"""
Input validation for tool arguments.

Each tool declares a pydantic model for its arguments. The models here are
the shared building blocks: pagination, date ranges, entity codes,
legislatures and state (UF) codes. Strings are stripped and unknown
arguments ignored.
"""

from typing import Annotated, Any, Dict, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
COMPACT_DATE_PATTERN = r"^\d{8}$"

M = TypeVar("M", bound=BaseModel)

Codigo = Annotated[int, Field(gt=0, description="Código identificador")]
Legislatura = Annotated[int, Field(ge=1, description="Número da legislatura")]
UF = Annotated[
    str,
    Field(min_length=2, max_length=2, description="Sigla da UF (ex: SP, RJ)"),
    AfterValidator(lambda v: v.upper()),
]
IsoDate = Annotated[str, Field(pattern=ISO_DATE_PATTERN, description="Data no formato YYYY-MM-DD")]


class ToolParams(BaseModel):
    """Base model for tool arguments."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def to_query(self, exclude: tuple = ()) -> Dict[str, Any]:
        """Arguments as API query parameters, without unset values."""
        return self.model_dump(exclude_none=True, exclude=set(exclude))


class NoParams(ToolParams):
    pass


class PaginationParams(ToolParams):
    pagina: Optional[int] = Field(None, ge=1, description="Número da página")
    itens: Optional[int] = Field(None, ge=1, le=100, description="Itens por página (máximo 100)")


class DateRangeParams(ToolParams):
    dataInicio: Optional[IsoDate] = Field(None, description="Data inicial (YYYY-MM-DD)")
    dataFim: Optional[IsoDate] = Field(None, description="Data final (YYYY-MM-DD)")


class CodeParams(ToolParams):
    codigo: Codigo


def validate_tool_input(schema: Type[M], args: Any, tool_name: str) -> M:
    """
    Validate tool arguments against ``schema``.

    Args:
        schema: Pydantic model describing the tool arguments
        args: Raw arguments received from the client
        tool_name: Tool name used in the error message

    Returns:
        Validated model instance

    Raises:
        ValidationError: With the first validation problem, its dotted field
            path (``input`` for the whole payload) and the raw arguments.
    """
    try:
        return schema.model_validate(args if args is not None else {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        raise ValidationError(f"Invalid input for {tool_name}: {first['msg']}", field, args) from e


def _clean_schema(node: Any) -> Any:
    if isinstance(node, list):
        return [_clean_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    node = {
        key: _clean_schema(value) for key, value in node.items() if not (key == "title" and isinstance(value, str))
    }

    # Optional[X] renders as anyOf [X, null]; MCP clients expect plain X
    any_of = node.get("anyOf")
    if isinstance(any_of, list):
        non_null = [option for option in any_of if option.get("type") != "null"]
        if len(non_null) == 1 and len(non_null) < len(any_of):
            del node["anyOf"]
            merged = dict(non_null[0])
            merged.update(node)
            node = merged

    if node.get("default", ...) is None:
        del node["default"]
    return node


def model_to_json_schema(schema: Type[BaseModel]) -> Dict[str, Any]:
    """JSON schema of a tool argument model as advertised in ``tools/list``."""
    json_schema = _clean_schema(schema.model_json_schema())
    json_schema.setdefault("type", "object")
    json_schema.setdefault("properties", {})
    return json_schema
