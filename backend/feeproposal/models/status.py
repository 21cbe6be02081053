"""Proposal status catalogue entries."""

from __future__ import annotations

from feeproposal.models.base import ProposalBaseModel
from feeproposal.models.enums import ProposalStatusCode  # noqa: TCH001


class ProposalStatus(ProposalBaseModel):
    """A row of the status catalogue referenced by ``Proposal.status_id``."""

    id: str
    code: ProposalStatusCode
    name: str
    description: str | None = None
    color: str | None = None
    is_initial: bool = False
    is_final: bool = False
