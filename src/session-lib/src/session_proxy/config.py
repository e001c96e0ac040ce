"""
session_proxy.config — Build ProxyConfig from the process environment.

Environment variables:
    OPENAI_API_KEY             API key (required unless the secret id below resolves)
    OPENAI_API_KEY_SECRET_ID   Secrets Manager id holding the API key (optional)
    CHATKIT_WORKFLOW_ID        Workflow identifier (required)
    CHATKIT_SESSIONS_URL       Sessions endpoint override, e.g. the local mock (optional)
    CHATKIT_BETA_HEADER        OpenAI-Beta header value (optional)
    CHATKIT_TIMEOUT_SECONDS    Outbound timeout in seconds (optional)

Secret values are never logged. Errors name variables only.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from session_proxy.exceptions import ConfigurationError
from session_proxy.models import CHATKIT_BETA_HEADER, CHATKIT_SESSIONS_URL, ProxyConfig

logger = Logger(service="chatkit-session")

API_KEY_ENV = "OPENAI_API_KEY"
API_KEY_SECRET_ID_ENV = "OPENAI_API_KEY_SECRET_ID"
WORKFLOW_ID_ENV = "CHATKIT_WORKFLOW_ID"
SESSIONS_URL_ENV = "CHATKIT_SESSIONS_URL"
BETA_HEADER_ENV = "CHATKIT_BETA_HEADER"
TIMEOUT_ENV = "CHATKIT_TIMEOUT_SECONDS"

# ---------------------------------------------------------------------------
# Global client/cache — reused across warm starts
# ---------------------------------------------------------------------------
_secretsmanager_client = None
_secret_cache: dict[str, str] = {}


def get_secretsmanager():
    global _secretsmanager_client
    if _secretsmanager_client is None:
        region = os.environ.get("AWS_REGION", "eu-west-2")
        _secretsmanager_client = boto3.client("secretsmanager", region_name=region)
    return _secretsmanager_client


def reset_cache() -> None:
    """Drop the cached client and secret values (cold-start state)."""
    global _secretsmanager_client
    _secretsmanager_client = None
    _secret_cache.clear()


def _str_or_none(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _extract_api_key(secret_string: str | None) -> str | None:
    """Accept a bare key or a JSON object holding it under a known field."""
    text = _str_or_none(secret_string)
    if text is None or not text.startswith("{"):
        return text
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return _str_or_none(data.get(API_KEY_ENV) or data.get("api_key"))


def resolve_api_key_secret(secret_id: str) -> str:
    """Read the API key from Secrets Manager, caching it for the container lifetime."""
    cached = _secret_cache.get(secret_id)
    if cached is not None:
        return cached

    try:
        response = get_secretsmanager().get_secret_value(SecretId=secret_id)
    except (BotoCoreError, ClientError) as exc:
        if isinstance(exc, ClientError):
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
        else:
            error_code = type(exc).__name__
        logger.error(
            "Failed to read API key secret",
            extra={"secret_id": secret_id, "error_code": error_code},
        )
        raise ConfigurationError(variables=(API_KEY_SECRET_ID_ENV,), secret_id=secret_id) from exc

    api_key = _extract_api_key(response.get("SecretString"))
    if api_key is None:
        logger.error("API key secret is empty or unrecognised", extra={"secret_id": secret_id})
        raise ConfigurationError(variables=(API_KEY_SECRET_ID_ENV,), secret_id=secret_id)

    _secret_cache[secret_id] = api_key
    return api_key


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigurationError(variables=(TIMEOUT_ENV,)) from None
    if timeout <= 0:
        raise ConfigurationError(variables=(TIMEOUT_ENV,))
    return timeout


def load_config(environ: Mapping[str, str] | None = None) -> ProxyConfig:
    """Build a ProxyConfig, raising ConfigurationError when anything required is absent.

    Reads os.environ at call time unless an explicit mapping is given.
    """
    env = os.environ if environ is None else environ

    api_key = _str_or_none(env.get(API_KEY_ENV))
    secret_id = _str_or_none(env.get(API_KEY_SECRET_ID_ENV))
    if api_key is None and secret_id is not None:
        api_key = resolve_api_key_secret(secret_id)

    workflow_id = _str_or_none(env.get(WORKFLOW_ID_ENV))

    missing = tuple(
        name for name, value in ((API_KEY_ENV, api_key), (WORKFLOW_ID_ENV, workflow_id)) if not value
    )
    if missing or api_key is None or workflow_id is None:
        raise ConfigurationError(variables=missing)

    return ProxyConfig(
        api_key=api_key,
        workflow_id=workflow_id,
        sessions_url=_str_or_none(env.get(SESSIONS_URL_ENV)) or CHATKIT_SESSIONS_URL,
        beta_header=_str_or_none(env.get(BETA_HEADER_ENV)) or CHATKIT_BETA_HEADER,
        timeout_seconds=_parse_timeout(_str_or_none(env.get(TIMEOUT_ENV))),
    )
