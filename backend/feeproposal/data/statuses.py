"""Seed status catalogue for the proposal workflow.

Colors match the badge colors the proposal list renders for each status.
"""

from feeproposal.models.enums import ProposalStatusCode
from feeproposal.models.status import ProposalStatus

SEED_STATUSES: list[ProposalStatus] = [
    ProposalStatus(
        id="1",
        code=ProposalStatusCode.EDIT,
        name="Edit",
        description="Proposal is being drafted",
        color="gray",
        is_initial=True,
    ),
    ProposalStatus(
        id="2",
        code=ProposalStatusCode.REVIEW,
        name="Review",
        description="Submitted for internal review",
        color="blue",
    ),
    ProposalStatus(
        id="3",
        code=ProposalStatusCode.APPROVED,
        name="Approved",
        description="Approved internally, ready to publish",
        color="green",
    ),
    ProposalStatus(
        id="4",
        code=ProposalStatusCode.PUBLISHED,
        name="Published",
        description="Sent to the client",
        color="purple",
    ),
    ProposalStatus(
        id="5",
        code=ProposalStatusCode.CLIENT_APPROVED,
        name="Active",
        description="Accepted by the client",
        color="green",
        is_final=True,
    ),
    ProposalStatus(
        id="6",
        code=ProposalStatusCode.CLIENT_REJECTED,
        name="Client Rejected",
        description="Declined by the client",
        color="red",
        is_final=True,
    ),
    ProposalStatus(
        id="7",
        code=ProposalStatusCode.ON_HOLD,
        name="On Hold",
        description="Paused",
        color="orange",
    ),
    ProposalStatus(
        id="8",
        code=ProposalStatusCode.CANCELLED,
        name="Cancelled",
        description="Withdrawn",
        color="red",
        is_final=True,
    ),
]
