"""Shared test fixtures: settings, a scripted mock backend and an in-memory sink."""

import json
import sys
from collections import defaultdict, deque
from pathlib import Path
from typing import Any

import httpx
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.config import Settings  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PATIENT_ID = "639dac0c-7065-4488-a782-ef81905213f3"
BASE_URL = "https://llu.test"


def load_fixture(name: str) -> dict:
    return json.loads((FIXTURES_DIR / name).read_text())


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "email": "jane.doe@example.com",
        "password": "hunter2",
        "region": "EU",
        "api_url": BASE_URL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class MockBackend:
    """Scripted LibreLinkUp backend behind an httpx.MockTransport.

    Each path serves a default (status, body) pair; `queue` pushes one-shot
    responses that are served first, in order.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.defaults: dict[str, tuple[int, Any]] = {
            "/llu/auth/login": (200, load_fixture("session.json")),
            "/llu/connections": (200, load_fixture("connections.json")),
            f"/llu/connections/{PATIENT_ID}/graph": (200, load_fixture("measurements.json")),
        }
        self._queued: dict[str, deque] = defaultdict(deque)

    def queue(self, path: str, status: int, body: Any) -> None:
        self._queued[path].append((status, body))

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self._queued[path]:
            status, body = self._queued[path].popleft()
        elif path in self.defaults:
            status, body = self.defaults[path]
        else:
            return httpx.Response(404, json={"status": 404})
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class MemoryAccumulator:
    def __init__(self) -> None:
        self.metrics: list[tuple[str, dict[str, Any], dict[str, str]]] = []

    def add_fields(self, measurement: str, fields: dict[str, Any], tags: dict[str, str]) -> None:
        self.metrics.append((measurement, dict(fields), dict(tags)))


@pytest.fixture
def backend():
    return MockBackend()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def acc():
    return MemoryAccumulator()


@pytest.fixture
def connections_response():
    return load_fixture("connections.json")


@pytest.fixture
def measurements_response():
    return load_fixture("measurements.json")
