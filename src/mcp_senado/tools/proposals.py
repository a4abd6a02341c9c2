"""
Legislative proposal (matéria) tools.
"""

from typing import List, Optional

from pydantic import Field

from mcp_senado.core.validation import CodeParams, DateRangeParams, PaginationParams

from .base import ToolDefinition
from .common import endpoint_tool


class SearchProposalsParams(DateRangeParams, PaginationParams):
    sigla: Optional[str] = Field(None, max_length=20, description="Sigla do tipo de matéria (ex: PLS, PEC, PLP)")
    numero: Optional[int] = Field(None, gt=0, description="Número da matéria")
    ano: Optional[int] = Field(None, ge=1900, le=2100, description="Ano da matéria")
    autor: Optional[str] = Field(None, max_length=100, description="Nome do autor")
    assunto: Optional[str] = Field(None, max_length=200, description="Assunto ou palavra-chave")
    tramitando: Optional[bool] = Field(None, description="Apenas matérias em tramitação")


class ProposalCodeParams(CodeParams):
    pass


class ProposalPagedParams(CodeParams, PaginationParams):
    pass


class ProposalProcessingParams(CodeParams, DateRangeParams, PaginationParams):
    pass


class ProposalsInProcessParams(DateRangeParams, PaginationParams):
    pass


class UpdatedProposalsParams(PaginationParams):
    numdias: Optional[int] = Field(None, ge=1, le=365, description="Número de dias considerados recentes")


class ProposalsByYearParams(PaginationParams):
    ano: int = Field(..., ge=1900, le=2100, description="Ano da matéria")
    sigla: Optional[str] = Field(None, max_length=20, description="Sigla do tipo de matéria (ex: PLS, PEC)")


PROPOSAL_TOOLS: List[ToolDefinition] = [
    endpoint_tool(
        "materias_pesquisar",
        "Pesquisa matérias legislativas no Senado Federal. Permite filtrar por tipo (PLS, PEC, PLP, etc.), número, "
        "ano, autor, assunto e palavras-chave, apenas matérias em tramitação ou por período específico.",
        "proposal",
        SearchProposalsParams,
        "/materia/pesquisa/lista",
        "Resultado da Pesquisa de Matérias:",
    ),
    endpoint_tool(
        "materia_detalhes",
        "Obtém informações detalhadas sobre uma matéria legislativa específica. Inclui tipo, número, ano, ementa, "
        "autores, local de tramitação e situação atual.",
        "proposal",
        ProposalCodeParams,
        "/materia/{codigo}",
        "Detalhes da Matéria:",
    ),
    endpoint_tool(
        "materia_votacoes",
        "Lista as votações realizadas sobre uma matéria legislativa específica, com data, resultado, placar e tipo "
        "de votação (nominal, simbólica, etc.).",
        "proposal",
        ProposalPagedParams,
        "/materia/{codigo}/votacoes",
        "Votações da Matéria:",
    ),
    endpoint_tool(
        "materia_tramitacoes",
        "Obtém o histórico de tramitação de uma matéria legislativa: cada movimentação com data, origem, destino, "
        "ação realizada e situação. Permite filtrar por período.",
        "proposal",
        ProposalProcessingParams,
        "/materia/{codigo}/tramitacoes",
        "Tramitações da Matéria:",
    ),
    endpoint_tool(
        "materia_textos",
        "Lista os textos disponíveis de uma matéria legislativa (texto inicial, substitutivos, pareceres, emendas, "
        "versões finais) com URLs para download.",
        "proposal",
        ProposalCodeParams,
        "/materia/{codigo}/textos",
        "Textos da Matéria:",
    ),
    endpoint_tool(
        "materia_autores",
        "Lista os autores de uma matéria legislativa, incluindo autor principal e coautores.",
        "proposal",
        ProposalCodeParams,
        "/materia/{codigo}/autores",
        "Autores da Matéria:",
    ),
    endpoint_tool(
        "materia_relacionadas",
        "Lista as matérias relacionadas a uma matéria específica: apensadas, substitutivos e outras relações "
        "legislativas.",
        "proposal",
        ProposalCodeParams,
        "/materia/{codigo}/relacionadas",
        "Matérias Relacionadas:",
    ),
    endpoint_tool(
        "materia_relatorias",
        "Lista os relatores designados para uma matéria, incluindo o relator atual e o histórico de relatores nas "
        "comissões.",
        "proposal",
        ProposalCodeParams,
        "/materia/{codigo}/relatorias",
        "Relatorias da Matéria:",
    ),
    endpoint_tool(
        "materias_tramitando",
        "Lista as matérias legislativas atualmente em tramitação no Senado Federal. Permite filtrar por período.",
        "proposal",
        ProposalsInProcessParams,
        "/materia/tramitando",
        "Matérias em Tramitação:",
    ),
    endpoint_tool(
        "materias_atualizadas",
        "Lista as matérias legislativas recentemente atualizadas. Útil para acompanhar movimentações recentes.",
        "proposal",
        UpdatedProposalsParams,
        "/materia/atualizadas",
        "Matérias Recentemente Atualizadas:",
    ),
    endpoint_tool(
        "materias_ano",
        "Lista as matérias legislativas de um ano específico. Permite filtrar por tipo de matéria (PLS, PEC, PLP, "
        "etc.).",
        "proposal",
        ProposalsByYearParams,
        "/materia/ano",
        "Matérias por Ano:",
    ),
    endpoint_tool(
        "materia_emendas",
        "Lista as emendas apresentadas a uma matéria legislativa: emendas de plenário, de comissão e substitutivos.",
        "proposal",
        ProposalPagedParams,
        "/materia/{codigo}/emendas",
        "Emendas da Matéria:",
    ),
]
