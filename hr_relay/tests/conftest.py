"""Shared fixtures: a recording stand-in for GreptimeDB."""

from typing import Callable, Iterator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from hr_relay.config import RelayConfig
from hr_relay.main import create_app


class FakeGreptime:
    """Records every write and answers with a configurable response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 204
        self.body = ""
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def records(self) -> List[str]:
        return [request.content.decode("utf-8") for request in self.requests]


@pytest.fixture
def greptime() -> FakeGreptime:
    return FakeGreptime()


@pytest.fixture
def make_client(greptime: FakeGreptime) -> Iterator[Callable[..., TestClient]]:
    """Build a started TestClient against the fake database."""
    clients: List[TestClient] = []

    def _make(config: Optional[RelayConfig] = None) -> TestClient:
        app = create_app(config or RelayConfig(), transport=greptime.transport)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
