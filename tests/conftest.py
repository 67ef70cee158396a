"""
Shared fixtures: an in-memory sidecar state API served through httpx.MockTransport.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from statebridge.state import StateClient


SIDECAR_ENDPOINT = "http://sidecar.test/v1.0"
STATE_PREFIX = "/v1.0/state"


class FakeSidecar:
    """Minimal state API: POST saves entries, GET/DELETE address one key."""

    def __init__(self):
        self.store: Dict[str, Any] = {}
        self.requests: List[httpx.Request] = []
        # When set, every request gets this response instead
        self.override: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.override is not None:
            return self.override(request)

        path = request.url.path
        if request.method == "POST" and path == STATE_PREFIX:
            for entry in json.loads(request.content):
                self.store[entry["key"]] = entry["value"]
            return httpx.Response(201)

        key = path[len(STATE_PREFIX) + 1:]
        if request.method == "GET":
            if key not in self.store:
                return httpx.Response(204)
            return httpx.Response(200, json=self.store[key])
        if request.method == "DELETE":
            self.store.pop(key, None)
            return httpx.Response(204)

        return httpx.Response(405)

    def reply(self, status_code: int, content: bytes = b"") -> None:
        """Answer every following request with a fixed response."""
        self.override = lambda request: httpx.Response(status_code, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def sidecar():
    """Fresh fake sidecar for each test."""
    return FakeSidecar()


@pytest.fixture
def state_client(sidecar):
    """State client wired to the fake sidecar."""
    return StateClient(SIDECAR_ENDPOINT, transport=sidecar.transport)
