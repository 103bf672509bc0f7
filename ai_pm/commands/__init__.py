from .cache_sync_command import CacheSyncCommand
from .proposal_command import ProposalCommand, ProposalReviewer

__all__ = ["CacheSyncCommand", "ProposalCommand", "ProposalReviewer"]
