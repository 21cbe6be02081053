"""Data layer: status catalogue and the in-memory proposal store."""

from feeproposal.data.repository import ProposalRepository
from feeproposal.data.statuses import SEED_STATUSES

__all__ = [
    "SEED_STATUSES",
    "ProposalRepository",
]
