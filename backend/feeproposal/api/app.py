"""FastAPI application: create_app factory with the proposal /api endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from feeproposal.config import ServerSettings, load_env
from feeproposal.exceptions import FeeProposalError, ProposalValidationError
from feeproposal.models.enums import ProposalAction  # noqa: TCH001
from feeproposal.models.proposal import NEW_PROPOSAL_ID, Proposal

if TYPE_CHECKING:
    from feeproposal.data.repository import ProposalRepository

load_env()

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


class ActionRequest(BaseModel):
    """Body of a workflow action call. Unknown keys are accepted and logged."""

    model_config = ConfigDict(extra="allow")

    status_id: str | None = None
    updated_by: str | None = None
    rejection_reason: str | None = None


def create_app(
    *,
    repository: ProposalRepository | None = None,
    settings: ServerSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    repository
        Optional pre-built repository for dependency injection (e.g. tests).
        If not provided, an empty one with the seed status catalogue is
        created on first request.
    settings
        Optional server settings. Read from the environment when omitted.
    """
    settings = settings or ServerSettings.from_env()
    app = FastAPI(title="Fee Proposals", version=API_VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state so tests can inject a pre-filled repository
    app.state.repository = repository

    def _get_repository() -> ProposalRepository:
        repo: ProposalRepository | None = app.state.repository
        if repo is not None:
            return repo
        from feeproposal.factory import create_default_repository

        repo = create_default_repository()
        app.state.repository = repo
        return repo

    @app.exception_handler(FeeProposalError)
    async def handle_proposal_error(
        request: Request, exc: FeeProposalError,
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.exception(
                "Unhandled proposal error on %s %s", request.method, request.url.path,
            )
        else:
            logger.info(
                "%s %s rejected (%d): %s",
                request.method,
                request.url.path,
                exc.status_code,
                exc,
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    # ------------------------------------------------------------------
    # GET /api/health
    # ------------------------------------------------------------------

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": API_VERSION}

    # ------------------------------------------------------------------
    # GET /api/proposal-statuses
    # ------------------------------------------------------------------

    @app.get("/api/proposal-statuses")
    def list_statuses() -> list[dict[str, Any]]:
        return [s.to_wire() for s in _get_repository().list_statuses()]

    # ------------------------------------------------------------------
    # GET /api/proposals?projectId=
    # ------------------------------------------------------------------

    @app.get("/api/proposals")
    def list_proposals(
        project_id: str | None = Query(default=None, alias="projectId"),
    ) -> list[dict[str, Any]]:
        if not project_id:
            msg = "Project ID is required"
            raise ProposalValidationError(msg)
        return [p.to_wire() for p in _get_repository().list_for_project(project_id)]

    # ------------------------------------------------------------------
    # /api/proposals/{proposal_id}
    # ------------------------------------------------------------------

    @app.get("/api/proposals/{proposal_id}")
    def get_proposal(proposal_id: str) -> dict[str, Any]:
        return _get_repository().get(proposal_id).to_wire()

    @app.post("/api/proposals/{proposal_id}")
    def create_proposal(proposal_id: str, proposal: Proposal) -> dict[str, Any]:
        if proposal_id != NEW_PROPOSAL_ID:
            msg = "Invalid proposal ID for new proposal"
            raise ProposalValidationError(msg)
        return _get_repository().create(proposal).to_wire()

    @app.put("/api/proposals/{proposal_id}")
    def update_proposal(proposal_id: str, proposal: Proposal) -> dict[str, Any]:
        return _get_repository().update(proposal_id, proposal).to_wire()

    @app.delete("/api/proposals/{proposal_id}")
    def delete_proposal(proposal_id: str) -> dict[str, bool]:
        _get_repository().delete(proposal_id)
        return {"success": True}

    @app.get("/api/proposals/{proposal_id}/summary")
    def proposal_summary(proposal_id: str) -> dict[str, Any]:
        repo = _get_repository()
        proposal = repo.get(proposal_id)
        return proposal.to_summary_dict(repo.get_status(proposal.status_id))

    # ------------------------------------------------------------------
    # PUT /api/proposals/{proposal_id}/{action}
    # ------------------------------------------------------------------

    @app.api_route("/api/proposals/{proposal_id}/{action}", methods=["PUT", "POST"])
    def apply_action(
        proposal_id: str,
        action: ProposalAction,
        body: ActionRequest | None = None,
    ) -> dict[str, Any]:
        body = body or ActionRequest()
        if body.rejection_reason:
            logger.info(
                "Proposal %s %s: %s", proposal_id, action, body.rejection_reason,
            )
        if body.model_extra:
            logger.debug(
                "Ignoring extra action fields for %s: %s",
                proposal_id,
                sorted(body.model_extra),
            )
        saved = _get_repository().apply_action(
            proposal_id, action, updated_by=body.updated_by,
        )
        return saved.to_wire()

    return app
