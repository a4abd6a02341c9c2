"""
Plenary session and speech tools.
"""

from typing import List, Optional

from pydantic import Field

from mcp_senado.core.validation import COMPACT_DATE_PATTERN, CodeParams, DateRangeParams, PaginationParams

from .base import ToolDefinition
from .common import endpoint_tool


class ListSessionsParams(DateRangeParams, PaginationParams):
    tipo: Optional[str] = Field(None, max_length=50, description="Tipo de sessão (ordinária, extraordinária, solene)")


class SessionCodeParams(CodeParams):
    pass


class PlenaryResultsByMonthParams(PaginationParams):
    data: str = Field(..., pattern=COMPACT_DATE_PATTERN, description="Data de referência do mês (YYYYMMDD)")


SESSION_TOOLS: List[ToolDefinition] = [
    endpoint_tool(
        "sessoes_listar",
        "Lista as sessões plenárias do Senado Federal. Permite filtrar por período e tipo de sessão (ordinária, "
        "extraordinária, solene, etc.).",
        "session",
        ListSessionsParams,
        "/sessao/lista",
        "Sessões Plenárias:",
    ),
    endpoint_tool(
        "sessao_detalhes",
        "Obtém informações detalhadas sobre uma sessão plenária específica: data, hora, tipo, pauta e presidência.",
        "session",
        SessionCodeParams,
        "/sessao/{codigo}",
        "Detalhes da Sessão:",
    ),
    endpoint_tool(
        "sessao_votacoes",
        "Lista as votações realizadas em uma sessão plenária específica, com as matérias votadas e os resultados.",
        "session",
        SessionCodeParams,
        "/sessao/{codigo}/votacoes",
        "Votações da Sessão:",
    ),
    endpoint_tool(
        "sessao_discursos",
        "Lista os discursos proferidos em uma sessão plenária específica, com o orador e o resumo de cada discurso.",
        "session",
        SessionCodeParams,
        "/sessao/{codigo}/discursos",
        "Discursos da Sessão:",
    ),
    endpoint_tool(
        "discurso_detalhes",
        "Obtém informações detalhadas sobre um discurso específico: texto ou resumo, orador, data, sessão e "
        "indexação temática.",
        "session",
        SessionCodeParams,
        "/discurso/{codigo}",
        "Detalhes do Discurso:",
    ),
    endpoint_tool(
        "plenario_resultados_mes",
        "Obtém um resumo dos resultados e atividades do plenário do Senado em um mês específico. Formato da data: "
        "YYYYMMDD.",
        "session",
        PlenaryResultsByMonthParams,
        "/plenario/resultado/mes/{data}",
        "Resultados do Plenário:",
    ),
]
