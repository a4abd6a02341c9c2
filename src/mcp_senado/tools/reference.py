"""
Reference data tools: legislatures, proposal types and statuses, committee
types and Brazilian states.
"""

from typing import List

from mcp_senado.core.validation import PaginationParams

from .base import ToolDefinition
from .common import endpoint_tool


class ReferenceListParams(PaginationParams):
    pass


REFERENCE_TOOLS: List[ToolDefinition] = [
    endpoint_tool(
        "legislaturas_listar",
        "Lista as legislaturas do Senado Federal. Uma legislatura corresponde a um período de 4 anos de mandato.",
        "reference",
        ReferenceListParams,
        "/legislatura/lista",
        "Legislaturas do Senado Federal:",
    ),
    endpoint_tool(
        "tipos_materia_listar",
        "Lista os tipos de matérias legislativas (PLS, PEC, PLP, etc.).",
        "reference",
        ReferenceListParams,
        "/tipoMateria/lista",
        "Tipos de Matérias Legislativas:",
    ),
    endpoint_tool(
        "situacoes_materia_listar",
        "Lista as situações possíveis de matérias legislativas (em tramitação, arquivada, aprovada, etc.).",
        "reference",
        ReferenceListParams,
        "/situacaoMateria/lista",
        "Situações de Matérias Legislativas:",
    ),
    endpoint_tool(
        "tipos_comissao_listar",
        "Lista os tipos de comissões do Senado (permanentes, temporárias, mistas, etc.).",
        "reference",
        ReferenceListParams,
        "/tipoComissao/lista",
        "Tipos de Comissões:",
    ),
    endpoint_tool(
        "ufs_listar",
        "Lista as Unidades Federativas (estados) do Brasil. Cada estado elege 3 senadores.",
        "reference",
        ReferenceListParams,
        "/uf/lista",
        "Estados Brasileiros (UFs):",
    ),
]
