"""HTTP entrypoint: resolve a ref from query parameters and map the outcome to a response."""

import logging
import time

from flask import Flask, jsonify, request

from .models import (
    EmptyRepository,
    NotFound,
    Outcome,
    ProtocolError,
    RefQuery,
    Resolved,
    TransportError,
    UsageError,
    failure_message,
)
from .resolver import resolve
from .settings import get_settings

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-github-token"
TOKEN_PARAM = "GITHUB_TOKEN"
JSON_HEADERS = {"Content-Type": "application/json"}
TEXT_HEADERS = {"Content-Type": "text/plain; charset=utf-8"}


def _failure_status(outcome: Outcome) -> int:
    if isinstance(outcome, (NotFound, EmptyRepository)):
        return 404
    if isinstance(outcome, UsageError):
        return 400
    if isinstance(outcome, TransportError):
        return 503
    if isinstance(outcome, ProtocolError):
        if 500 <= outcome.status_code <= 599:
            # bad gateway
            return 502
        if outcome.not_found:
            return 404
        return 500
    raise TypeError(f"unexpected outcome: {outcome!r}")


def to_response(outcome: Outcome) -> tuple[dict | str, int, dict]:
    """Map a resolve outcome to ``(body, status, headers)``.

    Dict bodies are sent as JSON, strings as plain text.
    """
    if isinstance(outcome, Resolved):
        return outcome.result.to_dict(), 200, JSON_HEADERS
    status = _failure_status(outcome)
    return failure_message(outcome), status, TEXT_HEADERS


def query_from_request() -> RefQuery:
    """Build a RefQuery from the current request.

    The token comes from the ``GITHUB_TOKEN`` query parameter, then the
    ``x-github-token`` header, then settings.
    """
    args = request.args
    token = args.get(TOKEN_PARAM) or request.headers.get(TOKEN_HEADER) or get_settings().github_token
    return RefQuery(
        owner=args.get("owner", ""),
        repo=args.get("repo", ""),
        ref=args.get("ref") or None,
        token=token or None,
    )


def create_app() -> Flask:
    app = Flask(__name__)

    @app.get("/")
    def resolve_ref():
        query = query_from_request()
        ts0 = time.monotonic()
        outcome = resolve(query)
        logger.info("duration: %dms", (time.monotonic() - ts0) * 1000)

        body, status, headers = to_response(outcome)
        if isinstance(body, dict):
            return jsonify(body), status, headers
        return body, status, headers

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    return app
