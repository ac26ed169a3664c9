"""httpx transport wrapper that debug-logs wire traffic with secrets redacted."""

import json
import logging
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

REDACTED = "*********"

# compared lowercase
_REDACTED_KEYS = {"email", "password", "token", "authticket"}
_REDACTED_HEADERS = {"authorization", "cookie", "set-cookie"}


def redact(obj: Any, keys: set[str] = _REDACTED_KEYS) -> Any:
    """Recursively replace values of sensitive keys."""
    if isinstance(obj, dict):
        return {k: REDACTED if k.lower() in keys else redact(v, keys) for k, v in obj.items()}
    if isinstance(obj, list):
        return [redact(v, keys) for v in obj]
    return obj


def redact_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        k: REDACTED if k.lower() in _REDACTED_HEADERS else v
        for k, v in headers.multi_items()
    }


def redact_body(raw: bytes) -> str:
    """Redacted JSON text of a body; non-JSON bodies are truncated instead."""
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.dumps(redact(json.loads(text)), separators=(",", ":"))
    except (json.JSONDecodeError, TypeError):
        return text[:500]


def _debug_enabled() -> bool:
    return logging.getLogger().isEnabledFor(logging.DEBUG)


def log_response_body(endpoint: str, content: bytes) -> None:
    """Debug-log a response body once the caller has read it."""
    if _debug_enabled() and content:
        logger.debug("http_response_body", endpoint=endpoint, body=redact_body(content))


class RedactingLogTransport(httpx.BaseTransport):
    """Wraps another transport and logs each exchange at debug level.

    Response bodies are left unread so callers can stream them.
    """

    def __init__(self, transport: httpx.BaseTransport):
        self.transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        debug = _debug_enabled()

        if debug:
            request.read()
            logger.debug(
                "http_request",
                method=request.method,
                url=str(request.url),
                headers=redact_headers(request.headers),
                body=redact_body(request.content) if request.content else None,
            )

        response = self.transport.handle_request(request)

        if debug:
            logger.debug(
                "http_response",
                url=str(request.url),
                status_code=response.status_code,
                headers=redact_headers(response.headers),
            )

        return response

    def close(self) -> None:
        self.transport.close()
