"""
session_proxy.client — ChatKit sessions API client.

One POST per create_session() call. No retry, no backoff, no token caching.
Upstream outcomes are returned as SessionResult values:

  - 2xx with a client_secret      -> SessionCreated
  - non-2xx                       -> UpstreamError (status + raw body, for server logs)
  - no response at all            -> TransportError

A 2xx whose body is not JSON, or lacks client_secret, raises ValueError:
that is an unexpected upstream contract break, not a routine failure.
"""

from __future__ import annotations

from typing import Any

import requests
from aws_lambda_powertools import Logger

from session_proxy.models import (
    ProxyConfig,
    SessionCreated,
    SessionRequest,
    SessionResult,
    TransportError,
    UpstreamError,
)

logger = Logger(service="chatkit-session")


class ChatKitSessionClient:
    """Creates ChatKit sessions with the server-held API key."""

    def __init__(self, config: ProxyConfig) -> None:
        self._config = config

    @property
    def sessions_url(self) -> str:
        return self._config.sessions_url

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
            # Required for the ChatKit beta endpoints
            "OpenAI-Beta": self._config.beta_header,
        }

    def create_session(self, request: SessionRequest) -> SessionResult:
        try:
            response = requests.post(
                self._config.sessions_url,
                headers=self.headers(),
                json=request.to_payload(),
                timeout=self._config.timeout_seconds,
            )
        except requests.exceptions.RequestException as exc:
            return TransportError(cause=exc)

        if not 200 <= response.status_code < 300:
            return UpstreamError(status_code=response.status_code, detail=response.text)

        body: Any = response.json()
        client_secret = body.get("client_secret") if isinstance(body, dict) else None
        if not isinstance(client_secret, str) or not client_secret:
            logger.error(
                "ChatKit response missing client_secret",
                extra={"fields": sorted(body) if isinstance(body, dict) else []},
            )
            raise ValueError("ChatKit sessions response did not include a client_secret")

        return SessionCreated(client_secret=client_secret)
