"""
dev-invoke.py — Invoke the ChatKit session proxy in-process.

Builds an API Gateway proxy event and runs it through the handler pipeline
using the current environment for configuration. For offline runs, start the
mock sessions API and point the proxy at it:

    uvicorn tests.mocks.mock_chatkit.main:app --port 8767
    export CHATKIT_SESSIONS_URL=http://localhost:8767/v1/chatkit/sessions

Usage:
    uv run python scripts/dev-invoke.py \\
        [--user-id <id>] \\
        [--method POST] \\
        [--raw-body '<json>']

Exit codes:
    0  Proxy returned 200
    1  Proxy returned an error response
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[1]
for _path in (REPO_ROOT / "src", REPO_ROOT / "src" / "session-lib" / "src"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from chatkit_session.handler import handle  # noqa: E402

logger = logging.getLogger("dev_invoke")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def build_event(method: str, user_id: str | None, raw_body: str | None) -> dict[str, Any]:
    """Build a minimal API Gateway REST proxy event.

    raw_body wins over user_id so malformed bodies can be exercised.
    """
    if raw_body is not None:
        body: str | None = raw_body
    elif user_id is not None:
        body = json.dumps({"userId": user_id})
    else:
        body = None
    return {
        "httpMethod": method.upper(),
        "headers": {"Content-Type": "application/json"},
        "body": body,
        "isBase64Encoded": False,
        "requestContext": {"requestId": "dev-invoke"},
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Invoke the ChatKit session proxy locally")
    parser.add_argument("--user-id", default=None, help="Caller identifier sent as userId")
    parser.add_argument("--method", default="POST", help="HTTP method (default: POST)")
    parser.add_argument("--raw-body", default=None, help="Raw request body, sent verbatim")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    event = build_event(args.method, args.user_id, args.raw_body)
    response = handle(event)

    logger.info("Proxy responded with status %s", response["statusCode"])
    print(json.dumps(json.loads(response["body"]), indent=2))
    return 0 if response["statusCode"] == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
