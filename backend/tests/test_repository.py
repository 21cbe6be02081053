"""Tests for the in-memory ProposalRepository."""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta

import pytest

from feeproposal.data import SEED_STATUSES, ProposalRepository
from feeproposal.exceptions import (
    InvalidTransitionError,
    ProposalConflictError,
    ProposalNotFoundError,
    ProposalValidationError,
)
from feeproposal.models import Proposal, ProposalAction, ProposalStatusCode

START = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_repository() -> ProposalRepository:
    ids = itertools.count(1)
    ticks = itertools.count(0)
    return ProposalRepository(
        SEED_STATUSES,
        id_factory=lambda: f"p-{next(ids)}",
        clock=lambda: START + timedelta(minutes=next(ticks)),
    )


def _make_draft(project_id: str = "proj-1") -> Proposal:
    return Proposal.new(project_id, now=START)


# ---------------------------------------------------------------------------
# Statuses
# ---------------------------------------------------------------------------


class TestStatuses:
    def test_seed_catalogue(self) -> None:
        repo = _make_repository()
        codes = [s.code for s in repo.list_statuses()]
        assert codes == list(ProposalStatusCode)
        assert repo.initial_status().code == ProposalStatusCode.EDIT

    def test_get_status_unknown(self) -> None:
        with pytest.raises(ProposalValidationError, match="Unknown status"):
            _make_repository().get_status("42")

    def test_final_flags(self) -> None:
        final = {s.code for s in SEED_STATUSES if s.is_final}
        assert final == {
            ProposalStatusCode.CLIENT_APPROVED,
            ProposalStatusCode.CLIENT_REJECTED,
            ProposalStatusCode.CANCELLED,
        }


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_assigns_id_number_status_and_version(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())

        assert saved.id == "p-1"
        assert saved.proposal_number == 1
        assert saved.revision_number == 1
        assert saved.status_id == "1"
        assert saved.version == 1
        assert saved.created_at == saved.updated_at == START
        assert repo.get("p-1") == saved

    def test_numbers_increase(self) -> None:
        repo = _make_repository()
        repo.create(_make_draft())
        second = repo.create(_make_draft("proj-2"))
        assert second.proposal_number == 2

    def test_explicit_number_and_status_are_kept(self) -> None:
        repo = _make_repository()
        draft = _make_draft().model_copy(
            update={"proposal_number": 12, "status_id": "2"}
        )
        saved = repo.create(draft)
        assert saved.proposal_number == 12
        assert saved.status_id == "2"

    def test_project_id_is_required(self) -> None:
        with pytest.raises(ProposalValidationError, match="Project ID is required"):
            _make_repository().create(Proposal())

    def test_unknown_status_is_rejected(self) -> None:
        draft = _make_draft().model_copy(update={"status_id": "nope"})
        with pytest.raises(ProposalValidationError):
            _make_repository().create(draft)


# ---------------------------------------------------------------------------
# Read / list
# ---------------------------------------------------------------------------


class TestRead:
    def test_get_unknown(self) -> None:
        with pytest.raises(ProposalNotFoundError, match="Proposal not found"):
            _make_repository().get("missing")

    def test_list_for_project_is_ordered(self) -> None:
        repo = _make_repository()
        repo.create(_make_draft().model_copy(update={"proposal_number": 5}))
        repo.create(_make_draft("other"))
        repo.create(
            _make_draft().model_copy(
                update={"proposal_number": 2, "revision_number": 3}
            )
        )
        repo.create(
            _make_draft().model_copy(
                update={"proposal_number": 2, "revision_number": 1}
            )
        )
        listed = repo.list_for_project("proj-1")
        assert [(p.proposal_number, p.revision_number) for p in listed] == [
            (2, 1),
            (2, 3),
            (5, 1),
        ]


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_update_bumps_version_and_keeps_identity(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        edited = saved.model_copy(
            update={"description": "Revised", "id": "ignored", "created_by": "x"}
        )

        updated = repo.update(saved.id, edited)

        assert updated.id == saved.id
        assert updated.description == "Revised"
        assert updated.version == 2
        assert updated.created_at == saved.created_at
        assert updated.created_by == saved.created_by
        assert updated.updated_at > saved.updated_at  # type: ignore[operator]

    def test_stale_version_conflicts(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        repo.update(saved.id, saved.model_copy(update={"description": "first"}))

        with pytest.raises(ProposalConflictError):
            repo.update(saved.id, saved.model_copy(update={"description": "second"}))
        assert repo.get(saved.id).description == "first"

    def test_missing_status_is_rejected(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        with pytest.raises(ProposalValidationError, match="Status is required"):
            repo.update(saved.id, saved.model_copy(update={"status_id": ""}))

    def test_missing_project_is_rejected(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        with pytest.raises(ProposalValidationError, match="Project ID is required"):
            repo.update(saved.id, saved.model_copy(update={"project_id": ""}))

    def test_unknown_proposal(self) -> None:
        with pytest.raises(ProposalNotFoundError):
            _make_repository().update("missing", _make_draft())


# ---------------------------------------------------------------------------
# Delete and workflow
# ---------------------------------------------------------------------------


class TestDelete:
    def test_delete_in_edit(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        repo.delete(saved.id)
        with pytest.raises(ProposalNotFoundError):
            repo.get(saved.id)

    def test_delete_after_review_is_refused(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        repo.apply_action(saved.id, ProposalAction.REVIEW)
        with pytest.raises(InvalidTransitionError):
            repo.delete(saved.id)
        assert repo.get(saved.id).id == saved.id


class TestApplyAction:
    def test_full_happy_path(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        for action in (
            ProposalAction.REVIEW,
            ProposalAction.APPROVE,
            ProposalAction.PUBLISH,
            ProposalAction.CLIENT_APPROVE,
        ):
            saved = repo.apply_action(saved.id, action, updated_by="u-1")

        assert repo.get_status(saved.status_id).code == ProposalStatusCode.CLIENT_APPROVED
        assert saved.version == 5
        assert saved.updated_by == "u-1"

    def test_invalid_action_leaves_proposal_alone(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        with pytest.raises(InvalidTransitionError):
            repo.apply_action(saved.id, ProposalAction.PUBLISH)
        assert repo.get(saved.id) == saved

    def test_action_makes_loaded_copy_stale(self) -> None:
        repo = _make_repository()
        saved = repo.create(_make_draft())
        repo.apply_action(saved.id, ProposalAction.HOLD)
        with pytest.raises(ProposalConflictError):
            repo.update(saved.id, saved)
