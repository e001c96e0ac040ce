"""
chatkit_session.handler — ChatKit session token proxy Lambda.

Exchanges the server-held OpenAI API key for a short-lived ChatKit
client_secret and hands only that secret to the browser.

Pipeline (single pass, no retry):
  1. Method gate          non-POST             -> 405
  2. Configuration        missing key/workflow -> 500, no upstream call
  3. Body parsing         unusable body        -> continue with {}
  4. Identifier           no userId            -> ANONYMOUS_USER_ID
  5. Upstream call        POST /v1/chatkit/sessions
  6. Upstream rejection   non-2xx              -> 500, detail logged only
  7. Success                                   -> 200 {"client_secret": ...}
  8. Anything else                             -> 500, message logged only

Responses are always JSON. Upstream error bodies, stack traces and secret
values never reach the caller.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext
from session_proxy import (
    ChatKitSessionClient,
    ConfigurationError,
    MethodNotAllowed,
    ProxyConfig,
    SessionRequest,
    load_config,
)
from session_proxy.models import (
    ANONYMOUS_USER_ID,
    USER_ID_FIELD,
    BodyParseResult,
    FallbackUsed,
    ParsedBody,
    SessionCreated,
    SessionResult,
    UpstreamError,
)

logger = Logger(service="chatkit-session")
tracer = Tracer()

# ---------------------------------------------------------------------------
# Caller-facing messages
# ---------------------------------------------------------------------------
METHOD_NOT_ALLOWED_MESSAGE = "Method Not Allowed. Use POST."
CONFIGURATION_ERROR_MESSAGE = "Server configuration error: Missing API keys."
UPSTREAM_ERROR_MESSAGE = (
    "Failed to create a session token. Check server logs for the upstream API error."
)
FATAL_ERROR_MESSAGE = "A fatal server error occurred."


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _error(status_code: int, message: str) -> dict[str, Any]:
    return _response(status_code, {"error": message})


def _http_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
    return str(method or "").upper()


def require_post(event: dict[str, Any]) -> None:
    method = _http_method(event)
    if method != "POST":
        raise MethodNotAllowed(method=method)


def parse_body(event: dict[str, Any]) -> BodyParseResult:
    """Parse the request body as a JSON object.

    Never raises: an absent, undecodable, malformed or non-object body
    yields FallbackUsed with a short reason.
    """
    raw_body = event.get("body")
    if raw_body is None or raw_body == "":
        return FallbackUsed(reason="empty body")

    if event.get("isBase64Encoded"):
        try:
            raw_body = base64.b64decode(raw_body, validate=True).decode("utf-8")
        except (TypeError, ValueError):
            return FallbackUsed(reason="undecodable base64 body")

    try:
        data = json.loads(raw_body)
    except (TypeError, ValueError, RecursionError):
        return FallbackUsed(reason="malformed JSON body")

    if not isinstance(data, dict):
        return FallbackUsed(reason="JSON body is not an object")
    return ParsedBody(data=data)


def resolve_user_id(body: dict[str, Any]) -> str:
    """Return the caller-supplied userId, or the shared anonymous identity."""
    value = body.get(USER_ID_FIELD)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return ANONYMOUS_USER_ID


@tracer.capture_method
def create_session(client: ChatKitSessionClient, request: SessionRequest) -> SessionResult:
    return client.create_session(request)


def _session_response(result: SessionResult) -> dict[str, Any]:
    if isinstance(result, SessionCreated):
        # Length only; the token itself is never logged.
        logger.info(
            "Created ChatKit client secret",
            extra={"client_secret_len": len(result.client_secret)},
        )
        return _response(200, {"client_secret": result.client_secret})

    if isinstance(result, UpstreamError):
        logger.error(
            "ChatKit API request failed",
            extra={"status_code": result.status_code, "detail": result.detail},
        )
        return _error(500, UPSTREAM_ERROR_MESSAGE)

    logger.exception(
        "ChatKit API unreachable",
        exc_info=result.cause,
        extra={"error_type": type(result.cause).__name__, "error": str(result.cause)},
    )
    return _error(500, FATAL_ERROR_MESSAGE)


def _issue_session(
    event: dict[str, Any],
    config: ProxyConfig,
    client_factory: Callable[[ProxyConfig], ChatKitSessionClient],
) -> dict[str, Any]:
    parsed = parse_body(event)
    if isinstance(parsed, FallbackUsed):
        logger.warning("Ignoring request body", extra={"reason": parsed.reason})

    user_id = resolve_user_id(parsed.data)
    logger.append_keys(anonymous_user=user_id == ANONYMOUS_USER_ID)

    request = SessionRequest(workflow_id=config.workflow_id, user=user_id)
    result = create_session(client_factory(config), request)
    return _session_response(result)


def handle(
    event: dict[str, Any],
    config_loader: Callable[[], ProxyConfig] = load_config,
    client_factory: Callable[[ProxyConfig], ChatKitSessionClient] = ChatKitSessionClient,
) -> dict[str, Any]:
    """Run the proxy pipeline for one inbound event and return a proxy response."""
    try:
        require_post(event)
        config = config_loader()
        return _issue_session(event, config, client_factory)
    except MethodNotAllowed as exc:
        logger.info("Rejected non-POST request", extra={"method": exc.method})
        return _error(405, METHOD_NOT_ALLOWED_MESSAGE)
    except ConfigurationError as exc:
        logger.error(
            "Missing critical environment variables",
            extra={"variables": list(exc.variables), "secret_id": exc.secret_id},
        )
        return _error(500, CONFIGURATION_ERROR_MESSAGE)
    except Exception as exc:
        logger.exception("Fatal error while creating ChatKit session", extra={"error": str(exc)})
        return _error(500, FATAL_ERROR_MESSAGE)


@logger.inject_lambda_context(
    correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True
)
@tracer.capture_lambda_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda entry point."""
    return handle(event)
