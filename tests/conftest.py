"""Shared fixtures: a fake Subsonic server behind httpx.MockTransport."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from subsonic_adapter.api.client import SubsonicClient
from subsonic_adapter.auth.service import CredentialStore
from subsonic_adapter.io.session_storage import MemoryStorage

SERVER = "https://s.example"


def ok(**payload: Any) -> dict[str, Any]:
    return {"subsonic-response": {"status": "ok", "version": "1.16.1", **payload}}


def failed(message: str | None = None, code: int = 40) -> dict[str, Any]:
    body: dict[str, Any] = {"status": "failed", "version": "1.16.1"}
    if message is not None:
        body["error"] = {"code": code, "message": message}
    return {"subsonic-response": body}


class FakeServer:
    """Answers by endpoint name (e.g. ``getGenres.view``) and records requests."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        route = self.routes.get(endpoint, ok())
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{endpoint}")]

    def params(self, endpoint: str) -> dict[str, str]:
        (request,) = self.calls(endpoint)
        return dict(request.url.params)


@pytest.fixture(autouse=True)
def _no_pinned_server(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SUBSONIC_SERVER_URL", raising=False)
    monkeypatch.delenv("SUBSONIC_CLIENT_NAME", raising=False)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def auth(server: FakeServer) -> CredentialStore:
    storage = MemoryStorage(
        {"server": SERVER, "username": "u", "salt": "s1", "hash": "h1"},
    )
    return CredentialStore(storage, client_name="web", transport=server.transport)


@pytest.fixture
def client(auth: CredentialStore, server: FakeServer) -> SubsonicClient:
    return SubsonicClient(auth, transport=server.transport)
