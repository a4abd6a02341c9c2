"""
Senator tools: current senators, profile, votes, authored proposals and
committee memberships.
"""

from typing import List, Optional

from pydantic import Field

from mcp_senado.core.validation import UF, CodeParams, DateRangeParams, Legislatura, PaginationParams

from .base import ToolDefinition
from .common import endpoint_tool


class ListSenatorsParams(PaginationParams):
    nome: Optional[str] = Field(None, max_length=100, description="Nome do senador (busca parcial)")
    partido: Optional[str] = Field(None, max_length=20, description="Sigla do partido (ex: PT, PSDB, MDB)")
    uf: Optional[UF] = Field(None, description="Sigla da UF (ex: SP, RJ, MG)")
    legislatura: Optional[Legislatura] = Field(None, description="Número da legislatura")


class SenatorDetailsParams(CodeParams):
    pass


class SenatorVotingParams(CodeParams, DateRangeParams, PaginationParams):
    pass


class SenatorAuthorshipsParams(CodeParams, DateRangeParams, PaginationParams):
    tipo: Optional[str] = Field(None, max_length=20, description="Tipo de matéria (ex: PLS, PEC)")


class SenatorCommitteesParams(CodeParams):
    legislatura: Optional[Legislatura] = Field(None, description="Número da legislatura")


SENATOR_TOOLS: List[ToolDefinition] = [
    endpoint_tool(
        "senadores_listar",
        "Lista senadores em exercício no Senado Federal. Permite filtrar por nome, partido, UF (estado) e "
        "legislatura. Retorna informações básicas como nome completo, nome parlamentar, partido, UF e situação.",
        "senator",
        ListSenatorsParams,
        "/senador/lista/atual",
        "Senadores do Senado Federal:",
    ),
    endpoint_tool(
        "senador_detalhes",
        "Obtém informações detalhadas sobre um senador específico. Inclui dados pessoais, biografia, formação "
        "acadêmica, telefones, endereços, e-mails, mandato atual, partido, UF, e outras informações relevantes.",
        "senator",
        SenatorDetailsParams,
        "/senador/{codigo}",
        "Detalhes do Senador:",
    ),
    endpoint_tool(
        "senador_votacoes",
        "Obtém o histórico de votações de um senador específico. Lista as votações em que o senador participou, "
        "incluindo a matéria votada, data, resultado e o voto do senador. Permite filtrar por período.",
        "senator",
        SenatorVotingParams,
        "/senador/{codigo}/votacoes",
        "Histórico de Votações do Senador:",
    ),
    endpoint_tool(
        "senador_autorias",
        "Lista as matérias legislativas (projetos de lei, emendas, requerimentos, etc.) de autoria de um senador "
        "específico. Permite filtrar por tipo de matéria e período.",
        "senator",
        SenatorAuthorshipsParams,
        "/senador/{codigo}/autorias",
        "Matérias de Autoria do Senador:",
    ),
    endpoint_tool(
        "senador_comissoes",
        "Lista as comissões das quais um senador é ou foi membro, com o cargo ocupado (presidente, "
        "vice-presidente, titular, suplente) e o período de participação. Permite filtrar por legislatura.",
        "senator",
        SenatorCommitteesParams,
        "/senador/{codigo}/comissoes",
        "Participação em Comissões do Senador:",
    ),
]
