"""
Tests for tool argument validation and JSON schema generation.
"""

import pytest

from mcp_senado.core.errors import ValidationError
from mcp_senado.core.validation import (
    CodeParams,
    DateRangeParams,
    NoParams,
    PaginationParams,
    model_to_json_schema,
    validate_tool_input,
)
from mcp_senado.tools.senators import ListSenatorsParams, SenatorVotingParams


class TestValidateToolInput:
    """validate_tool_input behaviour."""

    def test_valid_input(self):
        params = validate_tool_input(ListSenatorsParams, {"nome": "  Ana  ", "uf": "sp", "itens": 10}, "senadores_listar")

        assert params.nome == "Ana"
        assert params.uf == "SP"
        assert params.itens == 10
        assert params.partido is None

    def test_unknown_arguments_are_ignored(self):
        params = validate_tool_input(NoParams, {"extra": 1}, "t")

        assert params.model_dump() == {}

    def test_none_arguments(self):
        params = validate_tool_input(PaginationParams, None, "t")

        assert params.pagina is None

    def test_error_reports_field_and_value(self):
        args = {"itens": 101}

        with pytest.raises(ValidationError) as exc_info:
            validate_tool_input(PaginationParams, args, "senadores_listar")

        error = exc_info.value
        assert error.message.startswith("Invalid input for senadores_listar:")
        assert error.field == "itens"
        assert error.value == args

    @pytest.mark.parametrize("codigo", [0, -5, "abc"])
    def test_invalid_codes(self, codigo):
        with pytest.raises(ValidationError) as exc_info:
            validate_tool_input(CodeParams, {"codigo": codigo}, "t")

        assert exc_info.value.field == "codigo"

    def test_missing_required_code(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_tool_input(CodeParams, {}, "t")

        assert exc_info.value.field == "codigo"

    @pytest.mark.parametrize("value", ["2024-13", "01/02/2024", "20240102"])
    def test_invalid_iso_dates(self, value):
        with pytest.raises(ValidationError):
            validate_tool_input(DateRangeParams, {"dataInicio": value}, "t")

    def test_uf_length(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_tool_input(ListSenatorsParams, {"uf": "SPX"}, "t")

        assert exc_info.value.field == "uf"

    def test_non_object_input(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_tool_input(CodeParams, [1, 2], "t")

        assert exc_info.value.field == "input"

    def test_to_query_excludes_unset_and_path_fields(self):
        params = SenatorVotingParams(codigo=5012, dataInicio="2024-01-01")

        assert params.to_query(exclude=("codigo",)) == {"dataInicio": "2024-01-01"}


class TestJsonSchema:
    """Schemas advertised in tools/list."""

    def test_optional_fields_are_flattened(self):
        schema = model_to_json_schema(ListSenatorsParams)

        uf = schema["properties"]["uf"]
        assert schema["type"] == "object"
        assert "anyOf" not in uf
        assert uf["type"] == "string"
        assert uf["minLength"] == 2
        assert uf["maxLength"] == 2
        assert "default" not in uf
        assert "title" not in schema
        assert "title" not in uf

    def test_required_fields(self):
        schema = model_to_json_schema(SenatorVotingParams)

        assert schema["required"] == ["codigo"]
        assert schema["properties"]["codigo"]["exclusiveMinimum"] == 0
        assert schema["properties"]["dataInicio"]["pattern"] == r"^\d{4}-\d{2}-\d{2}$"

    def test_empty_model(self):
        schema = model_to_json_schema(NoParams)

        assert schema["type"] == "object"
        assert schema["properties"] == {}
