"""Proposal review/approval workflow.

Each action moves a proposal from one of its allowed source statuses to a
single target status:

    edit --review--> review --approve--> approved --publish--> published
    review/approved --reject--> edit
    published --client-approve--> client_approved
    published --client-reject--> client_rejected
    any non-final --hold--> on_hold
    any non-final --cancel--> cancelled
"""

from __future__ import annotations

from feeproposal.exceptions import InvalidTransitionError
from feeproposal.models.enums import ProposalAction, ProposalStatusCode

FINAL_STATUSES: frozenset[ProposalStatusCode] = frozenset({
    ProposalStatusCode.CLIENT_APPROVED,
    ProposalStatusCode.CLIENT_REJECTED,
    ProposalStatusCode.CANCELLED,
})

_NON_FINAL: frozenset[ProposalStatusCode] = (
    frozenset(ProposalStatusCode) - FINAL_STATUSES
)

# action -> (allowed source statuses, target status)
TRANSITIONS: dict[
    ProposalAction, tuple[frozenset[ProposalStatusCode], ProposalStatusCode]
] = {
    ProposalAction.REVIEW: (
        frozenset({ProposalStatusCode.EDIT}),
        ProposalStatusCode.REVIEW,
    ),
    ProposalAction.APPROVE: (
        frozenset({ProposalStatusCode.REVIEW}),
        ProposalStatusCode.APPROVED,
    ),
    ProposalAction.REJECT: (
        frozenset({ProposalStatusCode.REVIEW, ProposalStatusCode.APPROVED}),
        ProposalStatusCode.EDIT,
    ),
    ProposalAction.PUBLISH: (
        frozenset({ProposalStatusCode.APPROVED}),
        ProposalStatusCode.PUBLISHED,
    ),
    ProposalAction.CLIENT_APPROVE: (
        frozenset({ProposalStatusCode.PUBLISHED}),
        ProposalStatusCode.CLIENT_APPROVED,
    ),
    ProposalAction.CLIENT_REJECT: (
        frozenset({ProposalStatusCode.PUBLISHED}),
        ProposalStatusCode.CLIENT_REJECTED,
    ),
    ProposalAction.HOLD: (
        _NON_FINAL - {ProposalStatusCode.ON_HOLD},
        ProposalStatusCode.ON_HOLD,
    ),
    ProposalAction.CANCEL: (
        _NON_FINAL,
        ProposalStatusCode.CANCELLED,
    ),
}

# Only proposals still being edited may be deleted.
DELETABLE_STATUSES: frozenset[ProposalStatusCode] = frozenset({
    ProposalStatusCode.EDIT,
})


def next_status(
    current: ProposalStatusCode,
    action: ProposalAction,
) -> ProposalStatusCode:
    """Return the status ``action`` moves a proposal in ``current`` to.

    Raises:
        InvalidTransitionError: If the action is not allowed from ``current``.
    """
    sources, target = TRANSITIONS[action]
    if current not in sources:
        msg = f"Cannot {action} a proposal in '{current}' status"
        raise InvalidTransitionError(msg)
    return target


def allowed_actions(current: ProposalStatusCode) -> list[ProposalAction]:
    """Actions that are valid from ``current``, in declaration order."""
    return [
        action
        for action, (sources, _) in TRANSITIONS.items()
        if current in sources
    ]


def check_deletable(current: ProposalStatusCode) -> None:
    """Raise unless a proposal in ``current`` status may be deleted.

    Raises:
        InvalidTransitionError: If the proposal has left the edit status.
    """
    if current not in DELETABLE_STATUSES:
        msg = "Proposals can only be deleted in Edit status"
        raise InvalidTransitionError(msg)
