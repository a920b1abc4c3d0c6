"""
Unit tests for HttpxTransport, driven by httpx.MockTransport.
"""

import httpx
import pytest

from priority_request_queue.exceptions import ConstructionError, NetworkFailure
from priority_request_queue.transports import HttpxTransport
from priority_request_queue.transports.base import HandleState


def make_transport(handler, **client_kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), **client_kwargs)
    return HttpxTransport(client), client


class TestHttpxTransportSend:
    """Tests for performing attempts."""

    @pytest.mark.asyncio
    async def test_success_response(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b'{"ok": true}', headers={"X-Id": "7"})

        transport, client = make_transport(handler)
        handle = transport.open("POST", "https://api.test/items")
        response = await transport.send(
            handle, '{"a": 1}', {"Content-Type": "application/json"}
        )

        assert response.status_code == 200
        assert response.content == b'{"ok": true}'
        assert response.header("x-id") == "7"
        assert handle.state is HandleState.FINISHED
        assert seen[0].method == "POST"
        assert seen[0].content == b'{"a": 1}'
        assert seen[0].headers["content-type"] == "application/json"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status_reported_not_raised(self):
        """Status classification is left to the request."""
        transport, client = make_transport(lambda request: httpx.Response(503))
        handle = transport.open("GET", "https://api.test/")

        response = await transport.send(handle, None, {})

        assert response.status_code == 503
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_becomes_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport, client = make_transport(handler)
        handle = transport.open("GET", "https://down.test/")

        with pytest.raises(NetworkFailure) as exc_info:
            await transport.send(handle, None, {})
        assert exc_info.value.url == "https://down.test/"
        assert "connection refused" in exc_info.value.reason
        assert exc_info.value.retryable
        await client.aclose()

    @pytest.mark.asyncio
    async def test_progress_events(self):
        events = []
        body = b"x" * 10
        transport, client = make_transport(lambda request: httpx.Response(200, content=body))
        handle = transport.open("GET", "https://api.test/file")

        await transport.send(handle, None, {}, on_progress=events.append)

        assert events
        assert events[-1].loaded == 10
        assert events[-1].total == 10
        await client.aclose()


class TestHttpxTransportCredentials:
    """Tests for the credentials mode."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("with_credentials", "expected"), [(False, None), (True, "session=abc")]
    )
    async def test_cookie_header(self, with_credentials, expected):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("cookie"))
            return httpx.Response(204)

        transport, client = make_transport(handler, cookies={"session": "abc"})
        handle = transport.open("GET", "https://api.test/me", with_credentials)
        await transport.send(handle, None, {})

        assert seen == [expected]
        await client.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("with_credentials", "expected"),
        [(False, [None, None]), (True, ["session=abc", "session=abc"])],
    )
    async def test_cookie_header_on_redirect(self, with_credentials, expected):
        """Every redirect hop follows the credentials mode of the attempt."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path, request.headers.get("cookie")))
            if request.url.path == "/start":
                return httpx.Response(302, headers={"location": "/end"})
            return httpx.Response(200, content=b"done")

        transport, client = make_transport(
            handler, cookies={"session": "abc"}, follow_redirects=True
        )
        handle = transport.open("GET", "https://api.test/start", with_credentials)
        response = await transport.send(handle, None, {})

        assert response.status_code == 200
        assert response.content == b"done"
        assert [path for path, _ in seen] == ["/start", "/end"]
        assert [cookie for _, cookie in seen] == expected
        await client.aclose()

    @pytest.mark.asyncio
    async def test_redirect_not_followed_when_client_disallows(self):
        transport, client = make_transport(
            lambda request: httpx.Response(302, headers={"location": "/end"})
        )
        handle = transport.open("GET", "https://api.test/start")
        response = await transport.send(handle, None, {})

        assert response.status_code == 302
        await client.aclose()

    @pytest.mark.asyncio
    async def test_redirect_loop_becomes_network_failure(self):
        transport, client = make_transport(
            lambda request: httpx.Response(302, headers={"location": "/loop"}),
            follow_redirects=True,
            max_redirects=3,
        )
        handle = transport.open("GET", "https://api.test/loop")

        with pytest.raises(NetworkFailure, match="Exceeded 3 redirects"):
            await transport.send(handle, None, {})
        await client.aclose()


class TestHttpxTransportLifecycle:
    """Tests for client ownership and closing."""

    @pytest.mark.asyncio
    async def test_client_created_lazily(self):
        transport = HttpxTransport(timeout=5.0)
        assert transport._client is None

        client = transport.client
        assert isinstance(client, httpx.AsyncClient)
        assert client.timeout.connect == 5.0

        await transport.aclose()
        assert client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        transport, client = make_transport(lambda request: httpx.Response(200))
        await transport.aclose()

        assert not client.is_closed
        with pytest.raises(ConstructionError):
            transport.open("GET", "https://api.test/")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_closed_client_raises_construction_error(self):
        transport, client = make_transport(lambda request: httpx.Response(200))
        await client.aclose()

        with pytest.raises(ConstructionError, match="httpx client is closed"):
            transport.open("GET", "https://api.test/")
