"""
Committee tools.

There is no single "all committees" endpoint: the list is assembled from the
per-type composition listings, fetched concurrently.
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from pydantic import Field

from mcp_senado.core.errors import ResourceNotFoundError
from mcp_senado.core.validation import CodeParams, DateRangeParams, Legislatura, PaginationParams, validate_tool_input

from .base import ToolContext, ToolDefinition, ToolResult
from .common import (
    as_int,
    endpoint_tool,
    find_nested,
    first_value,
    format_result,
    get_nested_value,
    matches_filter,
    normalize_array,
    paginate_items,
)

logger = logging.getLogger(__name__)

COMMITTEE_LIST_ENDPOINT = "/composicao/lista"
COMMITTEE_TYPES = ("permanente", "temporaria", "cpi", "cpmi", "orgaos")
COMMITTEE_COMPOSITION_ENDPOINT = "/composicao/comissao"
COMMITTEE_AGENDA_ENDPOINT = "/comissao/agenda"
COMMITTEE_PROPOSALS_ENDPOINT = "/materia/lista/comissao"
DEFAULT_AGENDA_DAYS = 30

_LIST_WRAPPERS = (
    "ListaColegiados",
    "ComissoesPermanentes",
    "ComissoesTemporarias",
    "ComissoesCPI",
    "ComissoesCPMI",
    "OrgaosColegiados",
)


class ListCommitteesParams(PaginationParams):
    tipo: Optional[str] = Field(None, max_length=50, description="Tipo de comissão (ex: permanente, cpi)")
    sigla: Optional[str] = Field(None, max_length=20, description="Sigla da comissão (ex: CCJ, CAE)")


class CommitteeDetailsParams(CodeParams):
    pass


class CommitteeMembersParams(CodeParams):
    legislatura: Optional[Legislatura] = Field(None, description="Número da legislatura")


class CommitteeMeetingsParams(CodeParams, DateRangeParams, PaginationParams):
    pass


class CommitteeProposalsParams(CodeParams, PaginationParams):
    pass


def extract_committees(data: Any) -> List[Dict[str, Any]]:
    root = data
    if isinstance(root, dict):
        for key in _LIST_WRAPPERS:
            if root.get(key):
                root = root[key]
                break

    nested = find_nested(root, ("Colegiados", "Colegiado"), ("Colegiados",), ("Colegiado",))
    return [committee for committee in normalize_array(nested) if committee]


def committee_code(committee: Dict[str, Any]) -> Optional[int]:
    return as_int(first_value(committee, "Codigo", "CodigoColegiado", "CodigoComissao", "codigo"))


def committee_sigla(committee: Dict[str, Any]) -> Optional[str]:
    sigla = first_value(committee, "Sigla", "SiglaComissao", "SiglaColegiado", "sigla")
    return str(sigla).upper() if sigla else None


def to_agenda_date(value: Any) -> str:
    """``YYYY-MM-DD`` (or a date) to the ``YYYYMMDD`` form used by the agenda endpoint."""
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value).replace("-", "")[:8]


def default_agenda_range(today: Optional[date] = None) -> tuple:
    end = today or date.today()
    start = end - timedelta(days=DEFAULT_AGENDA_DAYS)
    return to_agenda_date(start), to_agenda_date(end)


async def fetch_all_committees(context: ToolContext) -> List[Dict[str, Any]]:
    responses = await asyncio.gather(
        *(context.http_client.get(f"{COMMITTEE_LIST_ENDPOINT}/{kind}", {}) for kind in COMMITTEE_TYPES)
    )
    committees: List[Dict[str, Any]] = []
    for response in responses:
        committees.extend(extract_committees(response))
    return committees


def _matches_committee_filters(committee: Any, params: ListCommitteesParams) -> bool:
    if not isinstance(committee, dict):
        return False

    sigla = committee.get("Sigla") or committee.get("SiglaColegiado") or committee.get("sigla")
    if not matches_filter(sigla, params.sigla):
        return False

    if params.tipo:
        tipo_sigla = committee.get("SiglaTipoColegiado") or committee.get("siglaTipoColegiado")
        tipo_nome = (
            committee.get("DescricaoTipoColegiado")
            or committee.get("descricaoTipoColegiado")
            or committee.get("NomeTipoColegiado")
        )
        return matches_filter(tipo_sigla, params.tipo) or matches_filter(tipo_nome, params.tipo)

    return True


async def list_committees(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(ListCommitteesParams, args, "comissoes_listar")
    logger.debug("Listing committees", extra={"tool": "comissoes_listar", "sigla": params.sigla, "tipo": params.tipo})

    try:
        committees = await fetch_all_committees(context)
    except Exception as e:
        logger.error(f"Failed to list committees: {e}")
        raise

    filtered = [committee for committee in committees if _matches_committee_filters(committee, params)]
    page, total = paginate_items(filtered, params.pagina, params.itens)
    return format_result(f"Comissões do Senado Federal ({len(page)} de {total}):", page)


async def committee_members(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(CommitteeMembersParams, args, "comissao_membros")

    try:
        response = await context.http_client.get(f"{COMMITTEE_COMPOSITION_ENDPOINT}/{params.codigo}", {})
    except Exception as e:
        logger.error(f"Failed to get committee members: {e}")
        raise

    members = find_nested(
        response,
        ("ComposicaoComissao", "Membros", "Membro"),
        ("Membros", "Membro"),
        ("Membros",),
    )
    return format_result("Membros da Comissão:", normalize_array(members))


async def committee_meetings(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(CommitteeMeetingsParams, args, "comissao_reunioes")

    default_start, default_end = default_agenda_range()
    start = to_agenda_date(params.dataInicio) if params.dataInicio else default_start
    end = to_agenda_date(params.dataFim) if params.dataFim else default_end
    path = f"{COMMITTEE_AGENDA_ENDPOINT}/{start}" if start == end else f"{COMMITTEE_AGENDA_ENDPOINT}/{start}/{end}"

    try:
        response = await context.http_client.get(path, {})
    except Exception as e:
        logger.error(f"Failed to get committee meetings: {e}")
        raise

    meetings = find_nested(
        response,
        ("AgendaReuniao", "reunioes", "reuniao"),
        ("reunioes", "reuniao"),
        ("reunioes",),
    )

    selected = [
        meeting
        for meeting in normalize_array(meetings)
        if any(
            isinstance(entry, dict) and as_int(entry.get("codigo")) == params.codigo
            for entry in normalize_array(get_nested_value(meeting, ("colegiados",)))
        )
    ]
    return format_result("Reuniões da Comissão:", selected)


async def committee_proposals(args: Dict[str, Any], context: ToolContext) -> ToolResult:
    params = validate_tool_input(CommitteeProposalsParams, args, "comissao_materias")

    try:
        committees = await fetch_all_committees(context)
        committee = next((c for c in committees if isinstance(c, dict) and committee_code(c) == params.codigo), None)
        if committee is None:
            raise ResourceNotFoundError(f"Comissão com código {params.codigo} não encontrada", "comissao")

        query: Dict[str, Any] = {"codigo": params.codigo, "sigla": committee_sigla(committee)}
        query.update(params.to_query(exclude=("codigo",)))
        response = await context.http_client.get(COMMITTEE_PROPOSALS_ENDPOINT, query)
    except Exception as e:
        logger.error(f"Failed to get committee proposals: {e}")
        raise

    proposals = find_nested(
        response,
        ("ListaMateriasEmComissao", "Materias", "Materia"),
        ("Materias", "Materia"),
        ("Materia",),
    )
    page, total = paginate_items(normalize_array(proposals), params.pagina, params.itens)
    return format_result(f"Matérias em Análise na Comissão ({len(page)} de {total}):", page)


COMMITTEE_TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name="comissoes_listar",
        description="Lista as comissões do Senado Federal. Permite filtrar por tipo (permanente, temporária, mista, "
        "parlamentar de inquérito, etc.) e sigla.",
        category="committee",
        schema=ListCommitteesParams,
        handler=list_committees,
    ),
    endpoint_tool(
        "comissao_detalhes",
        "Obtém informações detalhadas sobre uma comissão específica: nome completo, sigla, tipo, finalidade, "
        "competências, composição atual e contatos.",
        "committee",
        CommitteeDetailsParams,
        COMMITTEE_COMPOSITION_ENDPOINT + "/{codigo}",
        "Detalhes da Comissão:",
    ),
    ToolDefinition(
        name="comissao_membros",
        description="Lista os membros de uma comissão específica com seus cargos (presidente, vice-presidente, "
        "titular, suplente) e partidos.",
        category="committee",
        schema=CommitteeMembersParams,
        handler=committee_members,
    ),
    ToolDefinition(
        name="comissao_reunioes",
        description="Lista as reuniões de uma comissão específica com data, hora, tipo de reunião e pauta. "
        "Permite filtrar por período (padrão: últimos 30 dias).",
        category="committee",
        schema=CommitteeMeetingsParams,
        handler=committee_meetings,
    ),
    ToolDefinition(
        name="comissao_materias",
        description="Lista as matérias legislativas sob análise de uma comissão específica, com status de "
        "tramitação, relator designado e parecer emitido (se houver).",
        category="committee",
        schema=CommitteeProposalsParams,
        handler=committee_proposals,
    ),
]
