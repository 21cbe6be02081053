"""Formatting helpers for proposal summaries.

Currency follows how project managers read fee numbers (no cents on large
amounts); labels follow the proposal list badges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feeproposal.models.proposal import Proposal


def format_currency(amount: float) -> str:
    """Render a fee total for a proposal summary.

    Phase and proposal totals of $10,000 or more are shown in whole dollars
    ('$125,400'); smaller fees such as a single discipline line keep their
    cents ('$9,876.54').
    """
    if amount >= 10_000:
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def format_revision(proposal: Proposal) -> str:
    """'(Temporary)' for a temporary revision, '(Rev. N)' otherwise."""
    if proposal.is_temporary_revision:
        return "(Temporary)"
    return f"(Rev. {proposal.revision_number})"


def format_proposal_label(proposal: Proposal) -> str:
    """Short label such as 'Proposal #12 (Rev. 2)'.

    Unsaved proposals have no number yet and read 'New proposal'.
    """
    if not proposal.proposal_number:
        return "New proposal"
    return f"Proposal #{proposal.proposal_number} {format_revision(proposal)}"


def format_status_badge(status_name: str, proposal: Proposal) -> str:
    """Badge text such as 'Review (Rev. 1)' or 'Edit (Temporary)'."""
    return f"{status_name} {format_revision(proposal)}"
