"""Custom exception hierarchy for the fee proposal library."""

from __future__ import annotations


class FeeProposalError(Exception):
    """Base exception for all fee proposal errors.

    ``status_code`` is the HTTP status the reference API answers with when
    the error escapes a request handler.
    """

    status_code: int = 500


class ProposalValidationError(FeeProposalError):
    """Raised when a proposal is missing a required field."""

    status_code = 400


class ProposalNotFoundError(FeeProposalError):
    """Raised when a proposal id is unknown."""

    status_code = 404


class ProposalConflictError(FeeProposalError):
    """Raised when a save carries a stale ``version``."""

    status_code = 409


class InvalidTransitionError(FeeProposalError):
    """Raised when a workflow action is not allowed from the current status."""

    status_code = 409


class ProposalApiError(FeeProposalError):
    """Raised by the HTTP client when the proposal API call fails.

    ``status_code`` is ``None`` for transport failures (connection refused,
    timeout) where no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code  # type: ignore[assignment]
