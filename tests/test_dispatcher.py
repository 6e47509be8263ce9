"""
Tests for the authenticated request path: session guard, credential headers,
response decoding and error mapping.
"""

import asyncio
import datetime

import httpx
import pytest

from qbit_client.exceptions import AuthenticationError, RequestError
from qbit_client.session import AuthState, utcnow


class TestSessionGuard:
    @pytest.mark.asyncio
    async def test_first_request_logs_in_once(self, client, fake_server):
        fake_server.routes["/app/buildInfo"] = (200, {"qt": "6.7.2"})

        assert await client.get_build_info() == {"qt": "6.7.2"}
        assert fake_server.paths() == ["/auth/login", "/app/version", "/app/buildInfo"]

    @pytest.mark.asyncio
    async def test_valid_session_is_reused(self, client, fake_server):
        fake_server.routes["/app/buildInfo"] = (200, {})
        await client.get_build_info()
        await client.get_build_info()
        assert len(fake_server.calls("/auth/login")) == 1
        assert len(fake_server.calls("/app/buildInfo")) == 2

    @pytest.mark.asyncio
    async def test_failed_login_never_sends_request(self, client, fake_server):
        fake_server.login_status = 403

        with pytest.raises(AuthenticationError, match="Auth failed"):
            await client.get_build_info()

        assert len(fake_server.calls("/auth/login")) == 1
        assert fake_server.calls("/app/buildInfo") == []

    @pytest.mark.asyncio
    async def test_missing_cookie_never_sends_request(self, client, fake_server):
        fake_server.login_cookies = []

        with pytest.raises(AuthenticationError):
            await client.stop_torrents("abc")

        assert fake_server.calls("/torrents/stop") == []
        assert fake_server.calls("/torrents/pause") == []

    @pytest.mark.asyncio
    async def test_expired_session_logs_in_again(self, client, fake_server):
        client.state.auth = AuthState(sid="stale", expires=utcnow() - datetime.timedelta(seconds=1))
        fake_server.routes["/app/defaultSavePath"] = (200, "/downloads")

        assert await client.get_default_save_path() == "/downloads"
        assert len(fake_server.calls("/auth/login")) == 1
        assert fake_server.calls("/app/defaultSavePath")[0].headers["Cookie"] == "SID=abc123"


class TestRequest:
    @pytest.mark.asyncio
    async def test_credential_header_wins_over_caller_headers(self, client, fake_server):
        await client._dispatcher.request(
            "/app/defaultSavePath",
            headers={"Cookie": "SID=other", "X-Trace": "1"},
            parse_json=False,
        )
        request = fake_server.calls("/app/defaultSavePath")[0]
        assert request.headers["Cookie"] == "SID=abc123"
        assert request.headers["X-Trace"] == "1"

    @pytest.mark.asyncio
    async def test_query_params_are_normalized(self, client, fake_server):
        fake_server.routes["/torrents/info"] = (200, [])
        await client._dispatcher.request("/torrents/info", params={"reverse": True, "limit": 5, "tag": None})
        params = fake_server.calls("/torrents/info")[0].url.params
        assert params["reverse"] == "true"
        assert params["limit"] == "5"
        assert "tag" not in params

    @pytest.mark.asyncio
    async def test_text_response(self, client, fake_server):
        fake_server.routes["/app/version"] = (200, "v5.0.5")
        assert await client.get_application_version() == "v5.0.5"

    @pytest.mark.asyncio
    async def test_invalid_json(self, client, fake_server):
        fake_server.routes["/app/buildInfo"] = (200, "<html>not json</html>")
        with pytest.raises(RequestError, match="Invalid JSON") as exc_info:
            await client.get_build_info()
        assert exc_info.value.body == "<html>not json</html>"


class TestErrors:
    @pytest.mark.asyncio
    async def test_non_2xx_carries_status_and_body(self, client, fake_server):
        fake_server.routes["/torrents/properties"] = (404, "Torrent hash was not found")

        with pytest.raises(RequestError) as exc_info:
            await client.get_torrent_generic_properties("deadbeef")

        error = exc_info.value
        assert error.status_code == 404
        assert error.body == "Torrent hash was not found"
        assert str(error) == "Request failed: 404 Not Found Torrent hash was not found"
        assert error.timed_out is False

    @pytest.mark.asyncio
    async def test_transport_error(self, client, fake_server):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake_server.routes["/transfer/info"] = refuse
        with pytest.raises(RequestError, match="connection refused"):
            await client.get_global_transfer_info()

    @pytest.mark.asyncio
    async def test_invalid_url_is_request_error(self, client):
        with pytest.raises(RequestError, match="Request failed"):
            await client._transport.fetch("http://qbittorrent.test:notaport/api/v2/app/version")

    @pytest.mark.asyncio
    async def test_timeout(self, make_client, fake_server):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json={})

        fake_server.routes["/transfer/info"] = slow
        client = make_client(timeout=0.05)
        try:
            with pytest.raises(RequestError) as exc_info:
                await client.get_global_transfer_info()
        finally:
            await client.aclose()
        assert exc_info.value.timed_out is True

    @pytest.mark.asyncio
    async def test_login_timeout_is_auth_failure(self, make_client, fake_server):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200)

        fake_server.routes["/auth/login"] = slow
        client = make_client(timeout=0.05)
        try:
            with pytest.raises(AuthenticationError) as exc_info:
                await client.get_global_transfer_info()
        finally:
            await client.aclose()
        assert isinstance(exc_info.value.__cause__, RequestError)
        assert exc_info.value.__cause__.timed_out is True
        assert fake_server.calls("/transfer/info") == []


class TestHttpClientOverride:
    @pytest.mark.asyncio
    async def test_caller_owned_client_is_not_closed(self, make_client, fake_server):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_server.handler))
        client = make_client(transport=None, http_client=http_client)

        await client.get_default_save_path()
        await client.aclose()

        assert not http_client.is_closed
        assert len(fake_server.calls("/app/defaultSavePath")) == 1
        await http_client.aclose()
