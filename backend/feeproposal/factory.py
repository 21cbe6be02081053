"""Factory functions for creating pre-configured clients and repositories."""

from __future__ import annotations

from feeproposal.client import ProposalClient
from feeproposal.config import ClientSettings, load_env
from feeproposal.data.repository import ProposalRepository
from feeproposal.data.statuses import SEED_STATUSES


def create_default_repository() -> ProposalRepository:
    """Create an empty ProposalRepository with the seed status catalogue.

    This is what the reference API uses when no repository is injected.
    """
    return ProposalRepository(SEED_STATUSES)


def create_client(settings: ClientSettings | None = None) -> ProposalClient:
    """Create a ProposalClient for the configured API.

    When ``settings`` is omitted, ``.env`` is loaded and the settings are
    read from the environment (see :mod:`feeproposal.config`).

    Example::

        from feeproposal import ProposalEditor, create_client

        editor = ProposalEditor(create_client(), proposal_id, project_id)
        editor.load()
    """
    if settings is None:
        load_env()
        settings = ClientSettings.from_env()
    return ProposalClient.from_settings(settings)
