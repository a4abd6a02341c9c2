"""
Full tool catalog.
"""

from typing import List

from .base import ToolDefinition
from .committees import COMMITTEE_TOOLS
from .parties import PARTY_TOOLS
from .proposals import PROPOSAL_TOOLS
from .reference import REFERENCE_TOOLS
from .senators import SENATOR_TOOLS
from .sessions import SESSION_TOOLS
from .votings import VOTING_TOOLS

ALL_TOOLS: List[ToolDefinition] = [
    *SENATOR_TOOLS,
    *PROPOSAL_TOOLS,
    *VOTING_TOOLS,
    *COMMITTEE_TOOLS,
    *PARTY_TOOLS,
    *REFERENCE_TOOLS,
    *SESSION_TOOLS,
]


def register_all_tools(registry) -> int:
    """Register every tool in ``registry`` and return how many were added."""
    registry.register_many(ALL_TOOLS)
    return len(ALL_TOOLS)
