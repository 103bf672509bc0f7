"""
LLM proposal engine.
"""

from .analyzer import IssueAnalyzer, IssueProposal, decode_proposals
from .interaction_log import InteractionLogWriter

__all__ = ["IssueAnalyzer", "IssueProposal", "InteractionLogWriter", "decode_proposals"]
