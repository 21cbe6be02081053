"""ProposalEditor: owns the in-memory proposal document.

The editor holds the canonical document for one proposal, exposes the
update handles a fee calculation UI needs, and synchronizes with the API
on :meth:`ProposalEditor.load` and :meth:`ProposalEditor.save`. Every
handle delegates to a pure function from :mod:`feeproposal.merge` or
:mod:`feeproposal.contacts` and swaps in the returned document.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from feeproposal import contacts, merge
from feeproposal.exceptions import FeeProposalError
from feeproposal.models.proposal import Proposal

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from feeproposal.client import ProposalClient
    from feeproposal.models.calculation import (
        CalculationResult,
        FeeBatch,
        FixedFeeBatch,
        FormulaBatch,
        ManualBatch,
    )
    from feeproposal.models.proposal import Contact, ContactDraft

logger = logging.getLogger(__name__)


class EditorState(StrEnum):
    """Lifecycle of the editor's document."""

    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"
    SAVING = "saving"


class ProposalEditor:
    """Owned-state editor for a single proposal.

    Args:
        client: The API client used by :meth:`load` and :meth:`save`.
        proposal_id: Id of the proposal to edit (ignored when ``is_new``).
        project_id: Project the proposal belongs to.
        is_new: True for a proposal that has never been saved. It is
            synthesized locally on load and POSTed on its first save.
        user_id: Recorded as ``updated_by`` on discipline updates.
        on_change: Called with the new document after every change.
        clock: Returns the current time; used for calculation stamps.
        id_factory: Generates ids for new contacts.
    """

    def __init__(
        self,
        client: ProposalClient,
        proposal_id: str,
        project_id: str,
        *,
        is_new: bool = False,
        user_id: str = "",
        on_change: Callable[[Proposal], None] | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._client = client
        self.proposal_id = proposal_id
        self.project_id = project_id
        self.is_new = is_new
        self.user_id = user_id
        self._on_change = on_change
        self._clock = clock or (lambda: datetime.now(UTC))
        self._id_factory = id_factory
        self._document = Proposal()
        self.state = EditorState.LOADING

    @property
    def document(self) -> Proposal:
        return self._document

    def _set_document(self, document: Proposal) -> None:
        if document is self._document:
            return
        self._document = document
        if self._on_change is not None:
            self._on_change(document)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> Proposal:
        """Populate the document.

        A new proposal is synthesized locally without a request. Otherwise
        the proposal is fetched once; on failure the editor moves to
        ``LOAD_FAILED`` whatever the cause, keeps its current document, and
        re-raises. Only a ``READY`` editor can be saved.

        Raises:
            ProposalApiError: If the proposal could not be fetched.
        """
        if self.is_new:
            self._set_document(Proposal.new(self.project_id, now=self._clock()))
            self.state = EditorState.READY
            return self._document

        self.state = EditorState.LOADING
        try:
            document = self._client.get_proposal(self.proposal_id)
        except Exception as exc:
            logger.warning("Failed to load proposal %s: %s", self.proposal_id, exc)
            self.state = EditorState.LOAD_FAILED
            raise

        self._set_document(document)
        self.state = EditorState.READY
        return document

    def save(self) -> Proposal:
        """Send the whole document and adopt the server's copy.

        A new proposal is POSTed; afterwards the editor tracks the server
        assigned id so later saves are PUTs. On failure the local document
        is left as it was and the error is re-raised.

        Raises:
            FeeProposalError: If the proposal has not loaded successfully or
                a save is already in progress.
            ProposalApiError: If the save request failed.
        """
        if self.state == EditorState.LOAD_FAILED:
            msg = f"Proposal {self.proposal_id} failed to load; reload before saving"
            raise FeeProposalError(msg)
        if self.state != EditorState.READY:
            msg = f"Proposal {self.proposal_id} is {self.state}; cannot save"
            raise FeeProposalError(msg)

        self.state = EditorState.SAVING
        try:
            saved = self._client.save_proposal(self._document, is_new=self.is_new)
        except Exception as exc:
            logger.warning("Failed to save proposal %s: %s", self.proposal_id, exc)
            self.state = EditorState.READY
            raise

        if self.is_new:
            logger.info("Proposal created with id %s", saved.id)
            self.proposal_id = saved.id
            self.is_new = False
        self._set_document(saved)
        self.state = EditorState.READY
        return saved

    # ------------------------------------------------------------------
    # Document updates
    # ------------------------------------------------------------------

    def update_data(self, patch: Mapping[str, Any]) -> Proposal:
        self._set_document(merge.update_data(self._document, patch))
        return self._document

    def handle_fixed_fees(self, batch: FixedFeeBatch) -> Proposal:
        self._set_document(
            merge.merge_fixed_fee_batch(self._document, batch, now=self._clock())
        )
        return self._document

    def handle_formula_fees(self, batch: FormulaBatch) -> Proposal:
        self._set_document(
            merge.merge_formula_batch(self._document, batch, now=self._clock())
        )
        return self._document

    def handle_manual_fees(self, batch: ManualBatch) -> Proposal:
        self._set_document(
            merge.merge_manual_batch(self._document, batch, now=self._clock())
        )
        return self._document

    def handle_fee_calculation(
        self, batch: FeeBatch | Mapping[str, Any],
    ) -> Proposal:
        """Merge a batch of any kind; raw mappings are validated first."""
        self._set_document(
            merge.handle_fee_calculation(self._document, batch, now=self._clock())
        )
        return self._document

    def update_discipline_status(
        self, discipline_id: str, is_active: bool,
    ) -> Proposal:
        self._set_document(
            merge.update_discipline_status(
                self._document,
                discipline_id,
                is_active,
                updated_by=self.user_id,
                now=self._clock(),
            )
        )
        return self._document

    def update_discipline_calculations(
        self,
        discipline_id: str,
        calculations: Iterable[CalculationResult],
    ) -> Proposal:
        self._set_document(
            merge.update_discipline_calculations(
                self._document,
                discipline_id,
                calculations,
                updated_by=self.user_id,
                now=self._clock(),
            )
        )
        return self._document

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def add_contact(self, draft: ContactDraft | Mapping[str, Any]) -> Contact:
        """Add a contact and return it with its generated id."""
        self._set_document(
            contacts.add_contact(self._document, draft, id_factory=self._id_factory)
        )
        return self._document.contacts[-1]

    def update_contact(self, contact_id: str, patch: Mapping[str, Any]) -> Proposal:
        self._set_document(
            contacts.update_contact(self._document, contact_id, patch)
        )
        return self._document

    def remove_contact(self, contact_id: str) -> Proposal:
        self._set_document(contacts.remove_contact(self._document, contact_id))
        return self._document

    def set_primary_contact(self, contact_id: str) -> Proposal:
        self._set_document(
            contacts.set_primary_contact(self._document, contact_id)
        )
        return self._document

    def search_contacts(self, query: str) -> list[Contact]:
        return contacts.search_contacts(self._document, query)
