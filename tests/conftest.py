"""
urlscan-client Test Configuration
---------------------------------
Shared fixtures: a recording `httpx.MockTransport` so no test touches the
network unless it is explicitly marked live.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import httpx
import pytest


API_KEY = "test-api-key"


@dataclass
class RecordingTransport:
    """Answers every request with a fixed response and remembers what was sent."""

    status_code: int = 200
    payload: Any = None
    content: Optional[bytes] = None
    error: Optional[Exception] = None
    requests: List[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        if self.payload is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def mock_http_factory(transport: RecordingTransport) -> Callable[..., httpx.AsyncClient]:
    def _factory(*args, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))

    return _factory


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """No API key from the environment, the project .env or the user .env."""
    for name in ("URLSCAN_API_KEY", "URLSCAN_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    from core.config import AppSettings

    monkeypatch.setattr(
        "cli.main.AppSettings",
        lambda: AppSettings(_env_file=None),
    )
    return tmp_path
