"""Enums for the fee proposal domain models.

String values match the JSON stored by the proposal API, so documents
round-trip without translation.
"""

from enum import StrEnum


class Phase(StrEnum):
    """Project stage a calculation, service or discipline applies to."""

    DESIGN = "design"
    CONSTRUCTION = "construction"


class CalculationSource(StrEnum):
    """Where a calculation result came from.

    Also used as the ``type`` of a calculation history entry.
    """

    FIXED_FEES = "fixedfees"
    MANUAL = "manual"
    FORMULA = "formula"


class CalculationScope(StrEnum):
    """Most specific building node a calculation result is attached to."""

    STRUCTURE = "structure"
    LEVEL = "level"
    SPACE = "space"


class ProposalStatusCode(StrEnum):
    """Status codes of the proposal review/approval workflow."""

    EDIT = "edit"
    REVIEW = "review"
    APPROVED = "approved"
    PUBLISHED = "published"
    CLIENT_APPROVED = "client_approved"
    CLIENT_REJECTED = "client_rejected"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class ProposalAction(StrEnum):
    """Workflow actions, named after their ``/api/proposals/{id}/{action}`` path."""

    REVIEW = "review"
    APPROVE = "approve"
    REJECT = "reject"
    PUBLISH = "publish"
    CLIENT_APPROVE = "client-approve"
    CLIENT_REJECT = "client-reject"
    HOLD = "hold"
    CANCEL = "cancel"
