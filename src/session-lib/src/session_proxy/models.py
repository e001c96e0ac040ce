"""
session_proxy.models — Configuration, request and result types for the proxy.

Nothing here outlives a single invocation. Results are plain frozen
dataclasses; callers branch on their type with isinstance.

Result types:
    BodyParseResult  = ParsedBody | FallbackUsed
    SessionResult    = SessionCreated | UpstreamError | TransportError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Upstream constants
# ---------------------------------------------------------------------------
CHATKIT_SESSIONS_URL = "https://api.openai.com/v1/chatkit/sessions"
CHATKIT_BETA_HEADER = "chatkit_beta=v1"

# Every request without a caller identifier shares this upstream identity.
ANONYMOUS_USER_ID = "anonymous-user"

# Body field carrying the caller identifier.
USER_ID_FIELD = "userId"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProxyConfig:
    """Per-invocation proxy configuration.

    api_key is excluded from repr so the config can be logged safely.
    timeout_seconds=None leaves the HTTP client's default in place.
    """

    api_key: str = field(repr=False)
    workflow_id: str
    sessions_url: str = CHATKIT_SESSIONS_URL
    beta_header: str = CHATKIT_BETA_HEADER
    timeout_seconds: float | None = None


# ---------------------------------------------------------------------------
# Inbound body parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedBody:
    data: dict[str, Any]


@dataclass(frozen=True)
class FallbackUsed:
    """Body was absent or unusable; the pipeline continues with an empty object."""

    reason: str

    @property
    def data(self) -> dict[str, Any]:
        return {}


BodyParseResult = ParsedBody | FallbackUsed


# ---------------------------------------------------------------------------
# Outbound session request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionRequest:
    workflow_id: str
    user: str

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the ChatKit sessions API request body."""
        return {"workflow": {"id": self.workflow_id}, "user": self.user}


# ---------------------------------------------------------------------------
# Session results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionCreated:
    client_secret: str = field(repr=False)


@dataclass(frozen=True)
class UpstreamError:
    """Upstream answered with a non-2xx status. detail is for server logs only."""

    status_code: int
    detail: str


@dataclass(frozen=True)
class TransportError:
    """The request never produced an upstream response (DNS, TLS, reset, timeout)."""

    cause: Exception


SessionResult = SessionCreated | UpstreamError | TransportError
