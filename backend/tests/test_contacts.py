"""Tests for the contact roster operations."""

from __future__ import annotations

import itertools

import pytest
from pydantic import ValidationError

from feeproposal.contacts import (
    add_contact,
    new_contact_id,
    primary_contact,
    remove_contact,
    search_contacts,
    set_primary_contact,
    update_contact,
)
from feeproposal.models import Contact, ContactDraft, Proposal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_document(*contacts: Contact) -> Proposal:
    return Proposal(id="p-1", project_id="proj-1", contacts=list(contacts))


def _make_roster() -> Proposal:
    return _make_document(
        Contact(
            id="c-1",
            name="Ada Byron",
            email="ada@example.com",
            role="Owner",
            company="Analytical Engines",
            is_primary=True,
        ),
        Contact(
            id="c-2",
            name="Charles Babbage",
            email="charles@example.com",
            role="Architect",
            company="Analytical Engines",
        ),
        Contact(
            id="c-3",
            name="Grace Hopper",
            email="grace@navy.example",
            phone="555-0100",
            role="Contractor",
        ),
    )


def _counter_ids() -> itertools.count[int]:
    return itertools.count(1)


# ---------------------------------------------------------------------------
# add / remove
# ---------------------------------------------------------------------------


class TestAddContact:
    def test_new_contact_gets_generated_id(self) -> None:
        ids = _counter_ids()
        doc = add_contact(
            _make_document(),
            ContactDraft(name="Ada", email="ada@example.com"),
            id_factory=lambda: f"gen-{next(ids)}",
        )
        assert [c.id for c in doc.contacts] == ["gen-1"]
        assert doc.contacts[0].name == "Ada"

    def test_draft_id_is_ignored(self) -> None:
        doc = add_contact(
            _make_document(),
            {"id": "client-chosen", "name": "Ada"},
            id_factory=lambda: "server-side",
        )
        assert doc.contacts[0].id == "server-side"

    def test_existing_contact_is_copied_with_new_id(self) -> None:
        source = Contact(id="old", name="Ada", email="ada@example.com", role="Owner")

        doc = add_contact(_make_document(), source, id_factory=lambda: "fresh")

        added = doc.contacts[0]
        assert added.id == "fresh"
        assert added.name == "Ada"
        assert added.role == "Owner"
        assert source.id == "old"

    def test_default_ids_are_unique(self) -> None:
        doc = _make_document()
        doc = add_contact(doc, {"name": "A"})
        doc = add_contact(doc, {"name": "B"})
        assert doc.contacts[0].id != doc.contacts[1].id
        assert len(new_contact_id()) == 36

    def test_duplicate_emails_are_allowed(self) -> None:
        doc = _make_document()
        doc = add_contact(doc, {"name": "A", "email": "same@example.com"})
        doc = add_contact(doc, {"name": "B", "email": "same@example.com"})
        assert len(doc.contacts) == 2

    def test_input_is_not_mutated(self) -> None:
        doc = _make_document()
        add_contact(doc, {"name": "A"})
        assert doc.contacts == []


class TestRemoveContact:
    def test_add_then_remove_leaves_empty_roster(self) -> None:
        doc = add_contact(_make_document(), {"name": "Ada"}, id_factory=lambda: "x")
        doc = remove_contact(doc, "x")
        assert doc.contacts == []

    def test_unknown_id_is_noop(self) -> None:
        doc = _make_roster()
        assert remove_contact(doc, "missing") is doc

    def test_removing_primary_leaves_no_primary(self) -> None:
        doc = remove_contact(_make_roster(), "c-1")
        assert primary_contact(doc) is None
        assert [c.id for c in doc.contacts] == ["c-2", "c-3"]


# ---------------------------------------------------------------------------
# update / primary
# ---------------------------------------------------------------------------


class TestUpdateContact:
    def test_patch_is_merged(self) -> None:
        doc = update_contact(_make_roster(), "c-2", {"phone": "555-0199"})
        c2 = doc.contacts[1]
        assert c2.phone == "555-0199"
        assert c2.name == "Charles Babbage"

    def test_id_cannot_be_changed(self) -> None:
        doc = update_contact(_make_roster(), "c-2", {"id": "c-99", "name": "C. B."})
        assert doc.contacts[1].id == "c-2"
        assert doc.contacts[1].name == "C. B."

    def test_unknown_id_is_noop(self) -> None:
        doc = _make_roster()
        assert update_contact(doc, "missing", {"name": "X"}) is doc

    def test_bad_value_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            update_contact(_make_roster(), "c-1", {"is_primary": "sometimes"})


class TestPrimaryContact:
    @pytest.mark.parametrize("contact_id", ["c-1", "c-2", "c-3"])
    def test_exactly_one_primary(self, contact_id: str) -> None:
        doc = set_primary_contact(_make_roster(), contact_id)
        primaries = [c.id for c in doc.contacts if c.is_primary]
        assert primaries == [contact_id]
        assert primary_contact(doc) is not None
        assert primary_contact(doc).id == contact_id  # type: ignore[union-attr]

    def test_unknown_id_clears_primary(self) -> None:
        doc = set_primary_contact(_make_roster(), "missing")
        assert primary_contact(doc) is None


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


class TestSearchContacts:
    def test_single_token_matches_any_field(self) -> None:
        doc = _make_roster()
        assert [c.id for c in search_contacts(doc, "analytical")] == ["c-1", "c-2"]
        assert [c.id for c in search_contacts(doc, "555-0100")] == ["c-3"]

    def test_search_is_case_insensitive(self) -> None:
        assert [c.id for c in search_contacts(_make_roster(), "ADA")] == ["c-1"]

    def test_all_tokens_must_match(self) -> None:
        doc = _make_roster()
        assert [c.id for c in search_contacts(doc, "engines architect")] == ["c-2"]
        assert search_contacts(doc, "engines contractor") == []

    def test_more_tokens_narrow_the_result(self) -> None:
        doc = _make_roster()
        broad = {c.id for c in search_contacts(doc, "example")}
        narrow = {c.id for c in search_contacts(doc, "example owner")}
        assert narrow <= broad
        assert narrow == {"c-1"}

    def test_empty_query_matches_everyone(self) -> None:
        doc = _make_roster()
        assert len(search_contacts(doc, "   ")) == 3
