"""Request envelopes for the LibreLinkUp backend: fixed headers and JSON bodies."""

import json
from typing import Any

USER_AGENT = "FreeStyle LibreLink Up NightScout Uploader"


def build_headers(version: str, product: str, token: str | None = None) -> dict[str, str]:
    """Fixed header set, plus a bearer token when one is given.

    An empty token leaves Authorization out entirely; the backend then
    rejects the call and the client's re-login path takes over.
    """
    headers = {
        "User-Agent": USER_AGENT,
        "Content-Type": "application/json",
        "version": version,
        "product": product,
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
        "Pragma": "no-cache",
        "Cache-Control": "no-cache",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def encode_body(values: dict[str, Any] | None) -> bytes | None:
    """JSON-encode a request body. None means the request carries no body."""
    if values is None:
        return None
    return json.dumps(values, separators=(",", ":")).encode("utf-8")
