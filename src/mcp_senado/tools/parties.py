"""
Political party and parliamentary bloc tools.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from mcp_senado.core.errors import ResourceNotFoundError
from mcp_senado.core.validation import CodeParams, Legislatura, PaginationParams, validate_tool_input

from .base import ToolContext, ToolDefinition, ToolResult
from .common import as_int, endpoint_tool, find_nested, format_result, get_nested_value, normalize_array, paginate_items

logger = logging.getLogger(__name__)

PARTY_LIST_ENDPOINT = "/senador/partidos"
SENATORS_LIST_ENDPOINT = "/senador/lista/atual"
BLOC_LIST_ENDPOINT = "/composicao/lista/blocos"


class ListPartiesParams(PaginationParams):
    pass


class PartyDetailsParams(CodeParams):
    pass


class PartySenatorsParams(CodeParams):
    legislatura: Optional[Legislatura] = Field(None, description="Número da legislatura")


class ListBlocsParams(PaginationParams):
    legislatura: Optional[Legislatura] = Field(None, description="Número da legislatura")


class BlocDetailsParams(CodeParams):
    pass


def _unwrap_list(data: Any, envelope: str, plural: str, singular: str) -> List[Any]:
    root = data.get(envelope, data) if isinstance(data, dict) else data
    return [item for item in normalize_array(find_nested(root, (plural, singular), (plural,), (singular,))) if item]


def extract_parties(data: Any) -> List[Dict[str, Any]]:
    return _unwrap_list(data, "ListaPartidos", "Partidos", "Partido")


def extract_senators(data: Any) -> List[Dict[str, Any]]:
    return _unwrap_list(data, "ListaParlamentarEmExercicio", "Parlamentares", "Parlamentar")


def extract_blocs(data: Any) -> List[Dict[str, Any]]:
    return _unwrap_list(data, "ListaBlocoParlamentar", "Blocos", "Bloco")


def find_party(parties: List[Any], codigo: int) -> Optional[Dict[str, Any]]:
    for party in parties:
        if isinstance(party, dict) and as_int(party.get("Codigo")) == codigo:
            return party
    return None


def mandate_in_legislature(mandato: Any, legislatura: int) -> bool:
    if not isinstance(mandato, dict):
        return False
    for key in ("PrimeiraLegislaturaDoMandato", "SegundaLegislaturaDoMandato"):
        if as_int(get_nested_value(mandato, (key, "NumeroLegislatura"))) == legislatura:
            return True
    return False


def bloc_in_legislature(bloc: Any, legislatura: int) -> bool:
    legislaturas = None
    for path in (("Legislaturas", "Legislatura"), ("Legislaturas",), ("Legislatura",)):
        legislaturas = get_nested_value(bloc, path)
        if legislaturas is not None:
            break

    # Blocs without legislature information are kept
    if not legislaturas:
        return True

    return any(
        isinstance(entry, dict) and as_int(entry.get("NumeroLegislatura")) == legislatura
        for entry in normalize_array(legislaturas)
    )


async def _get_party(context: ToolContext, codigo: int) -> Dict[str, Any]:
    response = await context.http_client.get(PARTY_LIST_ENDPOINT, {})
    party = find_party(extract_parties(response), codigo)
    if party is None:
        raise ResourceNotFoundError(f"Partido com código {codigo} não encontrado", "partido")
    return party


async def list_parties(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(ListPartiesParams, args, "partidos_listar")

    try:
        response = await context.http_client.get(PARTY_LIST_ENDPOINT, {})
    except Exception as e:
        logger.error(f"Failed to list parties: {e}")
        raise

    page, total = paginate_items(extract_parties(response), params.pagina, params.itens)
    return format_result(f"Partidos Políticos do Senado Federal ({len(page)} de {total}):", page)


async def party_details(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(PartyDetailsParams, args, "partido_detalhes")

    try:
        party = await _get_party(context, params.codigo)
    except Exception as e:
        logger.error(f"Failed to get party details: {e}")
        raise

    return format_result("Detalhes do Partido:", party)


async def party_senators(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(PartySenatorsParams, args, "partido_senadores")

    try:
        party = await _get_party(context, params.codigo)
        sigla = str(party.get("Sigla") or "").upper()
        if not sigla:
            raise ResourceNotFoundError("Partido sem sigla associada na base de dados", "partido")
        response = await context.http_client.get(SENATORS_LIST_ENDPOINT, {})
    except Exception as e:
        logger.error(f"Failed to get party senators: {e}")
        raise

    senators = [
        senator
        for senator in extract_senators(response)
        if str(get_nested_value(senator, ("IdentificacaoParlamentar", "SiglaPartidoParlamentar")) or "").upper() == sigla
    ]
    if params.legislatura:
        senators = [
            senator
            for senator in senators
            if mandate_in_legislature(senator.get("Mandato"), params.legislatura)
        ]

    return format_result("Senadores do Partido:", senators)


async def list_blocs(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(ListBlocsParams, args, "blocos_listar")

    try:
        response = await context.http_client.get(BLOC_LIST_ENDPOINT, {})
    except Exception as e:
        logger.error(f"Failed to list parliamentary blocs: {e}")
        raise

    blocs = extract_blocs(response)
    if params.legislatura:
        blocs = [bloc for bloc in blocs if bloc_in_legislature(bloc, params.legislatura)]

    page, total = paginate_items(blocs, params.pagina, params.itens)
    return format_result(f"Blocos Parlamentares do Senado Federal ({len(page)} de {total}):", page)


PARTY_TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name="partidos_listar",
        description="Lista os partidos políticos com representação no Senado Federal, com sigla, nome completo e "
        "número de senadores filiados.",
        category="party",
        schema=ListPartiesParams,
        handler=list_parties,
    ),
    ToolDefinition(
        name="partido_detalhes",
        description="Obtém informações detalhadas sobre um partido político específico: sigla, nome completo, "
        "data de criação e situação.",
        category="party",
        schema=PartyDetailsParams,
        handler=party_details,
    ),
    ToolDefinition(
        name="partido_senadores",
        description="Lista os senadores filiados a um partido político específico, com nome, UF, situação e "
        "mandato. Permite filtrar por legislatura.",
        category="party",
        schema=PartySenatorsParams,
        handler=party_senators,
    ),
    ToolDefinition(
        name="blocos_listar",
        description="Lista os blocos parlamentares do Senado Federal, agrupamentos de partidos para atuação "
        "coordenada, e os partidos que os compõem. Permite filtrar por legislatura.",
        category="party",
        schema=ListBlocsParams,
        handler=list_blocs,
    ),
    endpoint_tool(
        "bloco_detalhes",
        "Obtém informações detalhadas sobre um bloco parlamentar específico: nome, partidos que o compõem, "
        "líderes e data de criação.",
        "party",
        BlocDetailsParams,
        "/composicao/bloco/{codigo}",
        "Detalhes do Bloco Parlamentar:",
    ),
]
