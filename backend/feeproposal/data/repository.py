"""In-memory proposal repository backing the reference API."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from feeproposal.exceptions import (
    ProposalConflictError,
    ProposalNotFoundError,
    ProposalValidationError,
)
from feeproposal.workflow import check_deletable, next_status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from feeproposal.models.enums import ProposalAction, ProposalStatusCode
    from feeproposal.models.proposal import Proposal
    from feeproposal.models.status import ProposalStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProposalRepository:
    """Repository for storing proposals and looking up statuses.

    Holds whole documents keyed by id. Every accepted write bumps the
    stored ``version``; an update must carry the version it was loaded
    with, otherwise it is rejected as a conflict.

    Args:
        statuses: The status catalogue. Exactly one entry should be marked
            ``is_initial``; it is assigned to new proposals without a status.
        proposals: Documents to pre-load, keyed by their ``id``.
        id_factory: Generates ids for created proposals (uuid4 by default).
        clock: Returns the current time (UTC now by default).
    """

    def __init__(
        self,
        statuses: Iterable[ProposalStatus],
        proposals: Iterable[Proposal] = (),
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._statuses = list(statuses)
        self._proposals: dict[str, Proposal] = {p.id: p for p in proposals}
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Statuses
    # ------------------------------------------------------------------

    def list_statuses(self) -> list[ProposalStatus]:
        return list(self._statuses)

    def get_status(self, status_id: str) -> ProposalStatus:
        """Look up a status by id.

        Raises:
            ProposalValidationError: If the id is not in the catalogue.
        """
        for status in self._statuses:
            if status.id == status_id:
                return status
        msg = f"Unknown status '{status_id}'"
        raise ProposalValidationError(msg)

    def get_status_by_code(self, code: ProposalStatusCode) -> ProposalStatus:
        for status in self._statuses:
            if status.code == code:
                return status
        msg = f"No status with code '{code}' in the catalogue"
        raise ProposalValidationError(msg)

    def initial_status(self) -> ProposalStatus:
        for status in self._statuses:
            if status.is_initial:
                return status
        msg = "The status catalogue has no initial status"
        raise ProposalValidationError(msg)

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def get(self, proposal_id: str) -> Proposal:
        """Return the stored proposal.

        Raises:
            ProposalNotFoundError: If no proposal has this id.
        """
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            msg = "Proposal not found"
            raise ProposalNotFoundError(msg)
        return proposal

    def list_for_project(self, project_id: str) -> list[Proposal]:
        """Proposals of a project ordered by proposal then revision number."""
        return sorted(
            (p for p in self._proposals.values() if p.project_id == project_id),
            key=lambda p: (p.proposal_number, p.revision_number),
        )

    def create(self, proposal: Proposal) -> Proposal:
        """Store a new proposal and return it as saved.

        The repository assigns the id, the proposal number (one past the
        highest existing number, unless the caller supplied one), a
        revision number of 1 when unset, the initial status when unset,
        timestamps, and version 1.

        Raises:
            ProposalValidationError: If ``project_id`` is missing or
                ``status_id`` is not in the catalogue.
        """
        if not proposal.project_id:
            msg = "Project ID is required"
            raise ProposalValidationError(msg)

        status_id = proposal.status_id or self.initial_status().id
        self.get_status(status_id)

        proposal_number = proposal.proposal_number or self._next_proposal_number()
        now = self._clock()
        saved = proposal.model_copy(
            update={
                "id": self._id_factory(),
                "proposal_number": proposal_number,
                "revision_number": proposal.revision_number or 1,
                "status_id": status_id,
                "created_at": now,
                "updated_at": now,
                "version": 1,
            }
        )
        self._proposals[saved.id] = saved
        logger.info(
            "Created proposal %s (number %d) for project %s",
            saved.id,
            saved.proposal_number,
            saved.project_id,
        )
        return saved

    def update(self, proposal_id: str, proposal: Proposal) -> Proposal:
        """Replace a stored proposal with ``proposal`` and return it as saved.

        Raises:
            ProposalNotFoundError: If no proposal has this id.
            ProposalValidationError: If ``project_id`` or ``status_id`` is
                missing or unknown.
            ProposalConflictError: If ``proposal.version`` is not the stored
                version.
        """
        stored = self.get(proposal_id)
        if not proposal.project_id:
            msg = "Project ID is required"
            raise ProposalValidationError(msg)
        if not proposal.status_id:
            msg = "Status is required"
            raise ProposalValidationError(msg)
        self.get_status(proposal.status_id)

        if proposal.version != stored.version:
            msg = (
                f"Proposal {proposal_id} was changed by another save "
                f"(stored version {stored.version}, got {proposal.version}); "
                f"reload before saving"
            )
            raise ProposalConflictError(msg)

        saved = proposal.model_copy(
            update={
                "id": stored.id,
                "created_at": stored.created_at,
                "created_by": stored.created_by,
                "updated_at": self._clock(),
                "version": stored.version + 1,
            }
        )
        self._proposals[proposal_id] = saved
        logger.info("Updated proposal %s to version %d", proposal_id, saved.version)
        return saved

    def delete(self, proposal_id: str) -> None:
        """Delete a proposal that is still in edit status.

        Raises:
            ProposalNotFoundError: If no proposal has this id.
            InvalidTransitionError: If the proposal has left edit status.
        """
        stored = self.get(proposal_id)
        check_deletable(self.get_status(stored.status_id).code)
        del self._proposals[proposal_id]
        logger.info("Deleted proposal %s", proposal_id)

    def apply_action(
        self,
        proposal_id: str,
        action: ProposalAction,
        *,
        updated_by: str | None = None,
    ) -> Proposal:
        """Move a proposal along the workflow and return it as saved.

        Raises:
            ProposalNotFoundError: If no proposal has this id.
            InvalidTransitionError: If the action is not allowed from the
                current status.
        """
        stored = self.get(proposal_id)
        current = self.get_status(stored.status_id)
        target = self.get_status_by_code(next_status(current.code, action))

        update: dict[str, object] = {
            "status_id": target.id,
            "updated_at": self._clock(),
            "version": stored.version + 1,
        }
        if updated_by:
            update["updated_by"] = updated_by
        saved = stored.model_copy(update=update)
        self._proposals[proposal_id] = saved
        logger.info(
            "Proposal %s: %s -> %s (%s)",
            proposal_id,
            current.code,
            target.code,
            action,
        )
        return saved

    def _next_proposal_number(self) -> int:
        return max(
            (p.proposal_number for p in self._proposals.values()),
            default=0,
        ) + 1
