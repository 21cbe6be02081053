"""HTTP client for the proposal REST API.

Every call transfers whole documents: a load receives the complete proposal
and a save sends it. Transport failures, non-2xx answers and 2xx bodies that
are not valid documents are raised as :class:`ProposalApiError`; nothing is
retried.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import TypeAdapter, ValidationError

from feeproposal.exceptions import ProposalApiError
from feeproposal.models.proposal import NEW_PROPOSAL_ID, Proposal
from feeproposal.models.status import ProposalStatus

if TYPE_CHECKING:
    from types import TracebackType

    from feeproposal.config import ClientSettings
    from feeproposal.models.enums import ProposalAction

logger = logging.getLogger(__name__)

_PROPOSALS_PATH = "/api/proposals"

_PROPOSAL: TypeAdapter[Proposal] = TypeAdapter(Proposal)
_PROPOSAL_LIST: TypeAdapter[list[Proposal]] = TypeAdapter(list[Proposal])
_STATUS_LIST: TypeAdapter[list[ProposalStatus]] = TypeAdapter(
    list[ProposalStatus]
)


def _error_message(response: httpx.Response) -> str:
    """Pull the server's error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("detail")
        if message:
            return str(message)
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class ProposalClient:
    """Client for ``/api/proposals`` and ``/api/proposal-statuses``.

    Args:
        http: A configured ``httpx.Client``. Its ``base_url`` is prepended to
            every request path, so a ``fastapi.testclient.TestClient`` works
            too.

    Example::

        client = ProposalClient.from_settings(ClientSettings.from_env())
        proposal = client.get_proposal("4f1c...")
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> ProposalClient:
        headers: dict[str, str] = {}
        if settings.api_token:
            headers["Authorization"] = f"Bearer {settings.api_token}"
        http = httpx.Client(
            base_url=settings.base_url,
            timeout=settings.timeout,
            headers=headers,
        )
        return cls(http)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ProposalClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def get_proposal(self, proposal_id: str) -> Proposal:
        return self._request(
            "GET", f"{_PROPOSALS_PATH}/{proposal_id}", adapter=_PROPOSAL,
        )

    def create_proposal(self, proposal: Proposal) -> Proposal:
        """POST an unsaved proposal; the server assigns id and number."""
        return self._request(
            "POST",
            f"{_PROPOSALS_PATH}/{NEW_PROPOSAL_ID}",
            json=proposal.to_wire(),
            adapter=_PROPOSAL,
        )

    def update_proposal(self, proposal: Proposal) -> Proposal:
        """PUT the whole document to its own resource path."""
        return self._request(
            "PUT",
            f"{_PROPOSALS_PATH}/{proposal.id}",
            json=proposal.to_wire(),
            adapter=_PROPOSAL,
        )

    def save_proposal(self, proposal: Proposal, *, is_new: bool) -> Proposal:
        """Create or update, returning the document as the server stored it."""
        if is_new:
            return self.create_proposal(proposal)
        return self.update_proposal(proposal)

    def delete_proposal(self, proposal_id: str) -> None:
        self._request("DELETE", f"{_PROPOSALS_PATH}/{proposal_id}")

    def list_proposals(self, project_id: str) -> list[Proposal]:
        """Proposals of a project, ordered by proposal and revision number."""
        return self._request(
            "GET",
            _PROPOSALS_PATH,
            params={"projectId": project_id},
            adapter=_PROPOSAL_LIST,
        )

    def apply_action(
        self,
        proposal_id: str,
        action: ProposalAction,
        *,
        status_id: str | None = None,
        **extra: Any,
    ) -> Proposal:
        """Run a workflow action (review, approve, hold, ...).

        ``extra`` is sent along in the body, e.g. ``rejection_reason``.
        """
        body: dict[str, Any] = {**extra}
        if status_id is not None:
            body["status_id"] = status_id
        return self._request(
            "PUT",
            f"{_PROPOSALS_PATH}/{proposal_id}/{action}",
            json=body,
            adapter=_PROPOSAL,
        )

    # ------------------------------------------------------------------
    # Statuses
    # ------------------------------------------------------------------

    def list_statuses(self) -> list[ProposalStatus]:
        return self._request(
            "GET", "/api/proposal-statuses", adapter=_STATUS_LIST,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        adapter: TypeAdapter[Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded, validated body.

        Raises:
            ProposalApiError: On transport failure, a non-2xx answer, or a
                2xx body that is not JSON or does not match ``adapter``.
        """
        logger.debug("%s %s", method, path)
        try:
            response = self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            msg = f"{method} {path} failed: {exc}"
            raise ProposalApiError(msg) from exc

        if response.is_error:
            message = _error_message(response)
            logger.debug(
                "%s %s -> %d: %s", method, path, response.status_code, message,
            )
            raise ProposalApiError(message, status_code=response.status_code)

        if not response.content and adapter is None:
            return None
        try:
            data = response.json()
        except ValueError as exc:
            msg = f"{method} {path} returned a body that is not JSON"
            raise ProposalApiError(msg, status_code=response.status_code) from exc
        if adapter is None:
            return data
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            msg = (
                f"{method} {path} returned a malformed document "
                f"({exc.error_count()} validation error(s))"
            )
            logger.warning("%s: %s", msg, exc)
            raise ProposalApiError(msg, status_code=response.status_code) from exc
