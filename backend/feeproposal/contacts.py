"""Contact roster operations over ``Proposal.contacts``.

All mutating operations return a new Proposal. ``set_primary_contact`` is
the only one that enforces the single-primary rule; removing the primary
contact leaves the roster without one.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from feeproposal.models.proposal import Contact, ContactDraft

if TYPE_CHECKING:
    from collections.abc import Callable

    from feeproposal.models.proposal import Proposal

logger = logging.getLogger(__name__)


def new_contact_id() -> str:
    """Generate a local identifier for a contact that has none yet."""
    return str(uuid.uuid4())


def add_contact(
    document: Proposal,
    draft: ContactDraft | Mapping[str, Any],
    *,
    id_factory: Callable[[], str] | None = None,
) -> Proposal:
    """Append a new contact with a freshly generated id.

    Any ``id`` in the draft is ignored. Emails are not checked for
    uniqueness.
    """
    if isinstance(draft, Mapping):
        draft = ContactDraft.model_validate(draft)
    fields = draft.model_dump(exclude={"id"})
    contact = Contact(**fields, id=(id_factory or new_contact_id)())
    logger.debug("Adding contact %s to proposal %s", contact.id, document.id)
    return document.model_copy(
        update={"contacts": [*document.contacts, contact]}
    )


def update_contact(
    document: Proposal,
    contact_id: str,
    patch: Mapping[str, Any],
) -> Proposal:
    """Shallow-merge ``patch`` into the matching contact.

    The contact id cannot be changed. Unknown ids are a no-op.

    Raises:
        pydantic.ValidationError: If the patch holds values of the wrong type.
    """
    changes = {key: value for key, value in patch.items() if key != "id"}
    if not any(c.id == contact_id for c in document.contacts):
        logger.debug("Contact %s not found; nothing updated", contact_id)
        return document

    contacts = [
        Contact.model_validate({**c.model_dump(), **changes})
        if c.id == contact_id
        else c
        for c in document.contacts
    ]
    return document.model_copy(update={"contacts": contacts})


def remove_contact(document: Proposal, contact_id: str) -> Proposal:
    """Drop the matching contact. Unknown ids are a no-op."""
    contacts = [c for c in document.contacts if c.id != contact_id]
    if len(contacts) == len(document.contacts):
        return document
    logger.debug("Removed contact %s from proposal %s", contact_id, document.id)
    return document.model_copy(update={"contacts": contacts})


def set_primary_contact(document: Proposal, contact_id: str) -> Proposal:
    """Make ``contact_id`` the only primary contact."""
    contacts = [
        c.model_copy(update={"is_primary": c.id == contact_id})
        for c in document.contacts
    ]
    return document.model_copy(update={"contacts": contacts})


def primary_contact(document: Proposal) -> Contact | None:
    """The primary contact, or None if no contact holds the flag."""
    return next((c for c in document.contacts if c.is_primary), None)


def search_contacts(document: Proposal, query: str) -> list[Contact]:
    """Find contacts matching every whitespace-separated token of ``query``.

    Matching is a case-insensitive substring test against the contact's
    name, email, phone, role and company. An empty query matches everyone.
    """
    tokens = query.lower().split()
    results = [
        c
        for c in document.contacts
        if all(token in c.searchable_text for token in tokens)
    ]
    logger.debug("Contact search %r matched %d contact(s)", query, len(results))
    return results
