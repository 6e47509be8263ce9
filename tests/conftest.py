from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

from qbit_client.client import QBittorrentClient
from qbit_client.models import LogEntry, PeerLogEntry

BASE_URL = "http://qbittorrent.test/api/v2"
API_PREFIX = "/api/v2"


def form(request: httpx.Request) -> dict:
    """Decode an url-encoded request body into a flat dict."""
    return {key: values[0] for key, values in parse_qs(request.content.decode(), keep_blank_values=True).items()}


class FakeQBittorrent:
    """
    In-process stand-in for the qBittorrent WebUI, served through httpx.MockTransport.

    Every request is recorded. A registered route overrides the built-in
    behaviour of its path; unknown endpoints answer 200 with an empty body.
    """

    def __init__(self, version="v5.0.5", sid="abc123"):
        self.version = version
        self.sid = sid
        self.login_status = 200
        self.login_cookies = [f"SID={sid}; HttpOnly; SameSite=Strict; path=/"]
        self.version_status = 200
        self.main_log = []
        self.peer_log = []
        self.routes = {}
        self.requests = []

    def calls(self, path):
        return [r for r in self.requests if r.url.path == API_PREFIX + path]

    def paths(self):
        return [r.url.path[len(API_PREFIX):] for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(API_PREFIX):]

        route = self.routes.get(path)
        if route is not None:
            if callable(route):
                return route(request)
            status, body = route
            if isinstance(body, (dict, list)):
                return httpx.Response(status, json=body)
            return httpx.Response(status, text=body)

        if path == "/auth/login":
            headers = [("set-cookie", cookie) for cookie in self.login_cookies]
            if 300 <= self.login_status < 400:
                headers.append(("location", "/"))
            return httpx.Response(self.login_status, headers=headers, text="Ok.")
        if path == "/auth/logout":
            return httpx.Response(200)
        if path == "/app/version":
            return httpx.Response(self.version_status, text=self.version)
        if path == "/log/main":
            last_known_id = int(request.url.params.get("last_known_id", -1))
            return httpx.Response(200, json=[e for e in self.main_log if e["id"] > last_known_id])
        if path == "/log/peers":
            last_known_id = int(request.url.params.get("last_known_id", -1))
            return httpx.Response(200, json=[e for e in self.peer_log if e["id"] > last_known_id])

        return httpx.Response(200, text="")


class FakeLogSource:
    """Log source that serves in-memory entries the way /log/main and /log/peers do."""

    def __init__(self, main=None, peer=None):
        self.main = list(main or [])
        self.peer = list(peer or [])
        self.main_calls = 0
        self.peer_calls = 0

    async def get_log(self, options=None):
        self.main_calls += 1
        last_known_id = options.last_known_id if options and options.last_known_id is not None else -1
        return [e for e in self.main if e.id > last_known_id]

    async def get_peer_log(self, last_known_id=None):
        self.peer_calls += 1
        last_known_id = -1 if last_known_id is None else last_known_id
        return [e for e in self.peer if e.id > last_known_id]


def log_entry(id, type=1, timestamp=1700000000, message=None):
    return LogEntry(id=id, message=message or f"entry {id}", timestamp=timestamp, type=type)


def peer_entry(id, ip="10.0.0.1"):
    return PeerLogEntry(id=id, ip=ip, timestamp=1700000000, blocked=True, reason="banned")


@pytest.fixture
def fake_server():
    return FakeQBittorrent()


@pytest.fixture
def make_client(fake_server):
    """Factory for clients wired to fake_server; closed by the test."""
    def _make(**overrides):
        options = {
            "base_url": BASE_URL,
            "username": "admin",
            "password": "adminadmin",
            "timeout": 5.0,
            "transport": httpx.MockTransport(fake_server.handler),
        }
        options.update(overrides)
        return QBittorrentClient(**options)
    return _make


@pytest_asyncio.fixture
async def client(make_client):
    client = make_client()
    yield client
    await client.aclose()
