"""
Roll-call voting tools.
"""

import logging
from typing import Any, Dict, List

from pydantic import Field

from mcp_senado.core.validation import ISO_DATE_PATTERN, CodeParams, PaginationParams, validate_tool_input

from .base import ToolContext, ToolDefinition, ToolResult
from .common import endpoint_tool, format_result, normalize_array, paginate_items

logger = logging.getLogger(__name__)


class ListVotingsParams(PaginationParams):
    data: str = Field(..., pattern=ISO_DATE_PATTERN, description="Data da votação (YYYY-MM-DD)")


class VotingCodeParams(CodeParams):
    pass


def extract_voting_sessions(data: Any) -> List[Dict[str, Any]]:
    """
    Pull the voting sessions out of a ``/votacao`` response.

    Accepts a bare list, ``{"sessoesVotacao": [...]}``,
    ``{"sessoesVotacao": {"sessaoVotacao": ...}}`` and ``{"sessaoVotacao": ...}``.
    """
    if not data:
        return []
    if isinstance(data, list):
        return data

    if isinstance(data, dict):
        top_level = data.get("sessoesVotacao")
        if isinstance(top_level, list):
            return top_level
        if isinstance(top_level, dict) and top_level.get("sessaoVotacao"):
            return normalize_array(top_level["sessaoVotacao"])
        if data.get("sessaoVotacao"):
            return normalize_array(data["sessaoVotacao"])

    return normalize_array(data)


async def list_votings(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(ListVotingsParams, args, "votacoes_listar")
    logger.debug("Listing voting sessions", extra={"tool": "votacoes_listar", "data": params.data})

    try:
        response = await context.http_client.get("/votacao", {"dataInicio": params.data, "dataFim": params.data})
    except Exception as e:
        logger.error(f"Failed to list voting sessions: {e}")
        raise

    sessions, total = paginate_items(extract_voting_sessions(response), params.pagina, params.itens)
    return format_result(f"Votações do Senado Federal ({len(sessions)} de {total}):", sessions)


VOTING_TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name="votacoes_listar",
        description="Lista as votações realizadas no Senado Federal em uma data específica, com a matéria votada, "
        "resultado e tipo de votação.",
        category="voting",
        schema=ListVotingsParams,
        handler=list_votings,
    ),
    endpoint_tool(
        "votacao_detalhes",
        "Obtém informações detalhadas sobre uma votação específica: matéria votada, data e hora, tipo de votação, "
        "resultado, placar e sessão na qual ocorreu.",
        "voting",
        VotingCodeParams,
        "/votacao/{codigo}",
        "Detalhes da Votação:",
    ),
    endpoint_tool(
        "votacao_votos",
        "Lista os votos individuais de uma votação específica, mostrando como cada senador votou (sim, não, "
        "abstenção, obstrução, etc.).",
        "voting",
        VotingCodeParams,
        "/votacao/{codigo}/votos",
        "Votos Individuais da Votação:",
    ),
    endpoint_tool(
        "votacao_orientacoes",
        "Obtém as orientações de voto de cada bancada partidária em uma votação específica.",
        "voting",
        VotingCodeParams,
        "/votacao/{codigo}/orientacoes",
        "Orientações Partidárias da Votação:",
    ),
    endpoint_tool(
        "votacao_estatisticas",
        "Obtém estatísticas de uma votação, com análises por partido, UF, gênero e outras métricas sobre o "
        "comportamento dos senadores.",
        "voting",
        VotingCodeParams,
        "/votacao/{codigo}/estatisticas",
        "Estatísticas da Votação:",
    ),
]
