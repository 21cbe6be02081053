"""Environment-driven settings for the proposal client and reference API.

Variables (a ``.env`` file is honored, see :func:`load_env`):

``FEEPROPOSAL_API_URL``
    Base URL of the proposal API. Defaults to ``http://localhost:3000``.
``FEEPROPOSAL_API_TIMEOUT``
    Request timeout in seconds. Unset means no timeout.
``FEEPROPOSAL_API_TOKEN``
    Optional bearer token sent with every request.
``FEEPROPOSAL_CORS_ORIGINS``
    Comma-separated origins allowed by the reference API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_CORS_ORIGINS: tuple[str, ...] = ("http://localhost:3000",)

_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent


def load_env() -> None:
    """Load ``.env`` from the project root, then from ``backend/``.

    Variables already set in the process environment win.
    """
    load_dotenv(_PROJECT_ROOT / ".env")
    load_dotenv(_BACKEND_DIR / ".env")


@dataclass(frozen=True)
class ClientSettings:
    """Connection settings for :class:`feeproposal.client.ProposalClient`."""

    base_url: str = DEFAULT_API_URL
    timeout: float | None = None
    api_token: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientSettings:
        """Read settings from ``environ`` (``os.environ`` by default).

        Raises:
            ValueError: If ``FEEPROPOSAL_API_TIMEOUT`` is not a positive number.
        """
        env = os.environ if environ is None else environ

        timeout: float | None = None
        raw_timeout = env.get("FEEPROPOSAL_API_TIMEOUT", "").strip()
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                msg = f"FEEPROPOSAL_API_TIMEOUT must be a number, got {raw_timeout!r}"
                raise ValueError(msg) from None
            if timeout <= 0:
                msg = "FEEPROPOSAL_API_TIMEOUT must be positive"
                raise ValueError(msg)

        return cls(
            base_url=env.get("FEEPROPOSAL_API_URL", "").strip() or DEFAULT_API_URL,
            timeout=timeout,
            api_token=env.get("FEEPROPOSAL_API_TOKEN") or None,
        )


@dataclass(frozen=True)
class ServerSettings:
    """Settings of the reference FastAPI app."""

    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerSettings:
        env = os.environ if environ is None else environ
        raw = env.get("FEEPROPOSAL_CORS_ORIGINS", "")
        origins = tuple(o.strip() for o in raw.split(",") if o.strip())
        return cls(cors_origins=origins or DEFAULT_CORS_ORIGINS)
