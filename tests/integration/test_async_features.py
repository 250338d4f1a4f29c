"""Integration tests for async client features."""

import asyncio

import httpx
import pytest
from httpx import codes
from pytest_httpx import HTTPXMock

from flora_client import (
    AsyncClient,
    AsyncHTTPXTransport,
    AuthError,
    ClientConfig,
    RequestSpec,
    ServerError,
    TransportError,
    TransportRequest,
)

BASE_URL = "http://api.example.com/"
ENVELOPE = {"meta": {}, "data": []}


class AsyncAPIClient(AsyncClient):
    """Test async client."""

    client_config = ClientConfig(url=BASE_URL)


class AsyncRecordingTransport:
    """Async transport double that records requests."""

    def __init__(self) -> None:
        self.requests: list[TransportRequest] = []
        self.closed = False

    async def send(self, request: TransportRequest) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(codes.OK, json=ENVELOPE)

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
class TestAsyncBasicOperations:
    """Tests for basic async requests."""

    async def test_async_get(self, httpx_mock: HTTPXMock) -> None:
        """Test an async GET request."""
        httpx_mock.add_response(
            url="http://api.example.com/user/1337", method="GET", json=ENVELOPE
        )

        async with AsyncAPIClient() as client:
            response = await client.execute(resource="user", id=1337)

        assert response == ENVELOPE

    async def test_async_post(self, httpx_mock: HTTPXMock) -> None:
        """Test an async POST with a JSON body."""
        httpx_mock.add_response(
            url="http://api.example.com/article/?action=create",
            method="POST",
            json=ENVELOPE,
        )

        async with AsyncAPIClient() as client:
            await client.execute(
                {"resource": "article", "action": "create", "data": {"title": "x"}}
            )

        request = httpx_mock.get_request()
        assert request is not None
        assert request.content == b'{"title":"x"}'

    async def test_async_server_error(self, httpx_mock: HTTPXMock) -> None:
        """Test that server errors are raised from async calls."""
        httpx_mock.add_response(
            status_code=codes.INTERNAL_SERVER_ERROR,
            json={"meta": {}, "data": None, "error": {"message": "foobar"}},
        )

        async with AsyncAPIClient() as client:
            with pytest.raises(ServerError, match="foobar"):
                await client.execute(resource="user")

    async def test_async_timeout(self, httpx_mock: HTTPXMock) -> None:
        """Test that async timeouts carry the ETIMEDOUT code."""
        httpx_mock.add_exception(httpx.ConnectTimeout("Connect timed out"))

        async with AsyncAPIClient() as client:
            with pytest.raises(TransportError) as exc_info:
                await client.execute(resource="user")

        assert exc_info.value.code == "ETIMEDOUT"
        assert exc_info.value.message == "Request timed out after 15000 milliseconds"

    async def test_concurrent_requests(self) -> None:
        """Test that concurrent calls are independent."""
        transport = AsyncRecordingTransport()
        client = AsyncClient(url=BASE_URL, transport=transport)

        await asyncio.gather(
            client.execute(resource="user", id=1),
            client.execute(resource="user", id=2, action="lock"),
        )

        urls = sorted(request.url for request in transport.requests)
        assert urls == [
            "http://api.example.com/user/1",
            "http://api.example.com/user/2?action=lock",
        ]

    async def test_close_keeps_injected_transport_open(self) -> None:
        """Test that closing the client leaves an injected transport open."""
        transport = AsyncRecordingTransport()

        async with AsyncClient(url=BASE_URL, transport=transport):
            pass

        assert transport.closed is False

    async def test_close_closes_own_transport(self) -> None:
        """Test that closing the client closes the transport it created."""
        client = AsyncClient(url=BASE_URL)
        http_client = client._transport._httpx_client

        await client.close()

        assert http_client.is_closed is True

    async def test_transport_keeps_injected_httpx_client_open(self) -> None:
        """Test that closing a transport leaves an injected httpx client open."""
        async with httpx.AsyncClient() as http_client:
            async with AsyncHTTPXTransport(client=http_client):
                pass

            assert http_client.is_closed is False

    async def test_timeout_reports_injected_client_timeout(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that the timeout message uses the timeout of an injected client."""
        httpx_mock.add_exception(httpx.ReadTimeout("Read timed out"))

        async with httpx.AsyncClient(timeout=0.75) as http_client:
            transport = AsyncHTTPXTransport(client=http_client)
            with pytest.raises(TransportError) as exc_info:
                await transport.send(TransportRequest("GET", f"{BASE_URL}user/"))

        assert exc_info.value.message == "Request timed out after 750 milliseconds"


@pytest.mark.asyncio
class TestAsyncAuth:
    """Tests for auth handler delegation."""

    async def test_handler_adds_authorization_header(
        self, httpx_mock: HTTPXMock
    ) -> None:
        """Test that an async handler can add headers."""
        httpx_mock.add_response(
            url="http://api.example.com/user/",
            method="GET",
            match_headers={"Authorization": "Bearer __token__"},
            json=ENVELOPE,
        )

        async def auth(request: RequestSpec) -> None:
            request.http_headers["Authorization"] = "Bearer __token__"

        async with AsyncClient(url=BASE_URL, auth=auth) as client:
            await client.execute(resource="user", auth=True)

    async def test_handler_adds_access_token(self, httpx_mock: HTTPXMock) -> None:
        """Test that parameters added by the handler are force-get params."""
        httpx_mock.add_response(
            url="http://api.example.com/user/1337?action=update&access_token=__token__",
            method="POST",
            json=ENVELOPE,
        )

        async def auth(request: RequestSpec) -> None:
            request.access_token = "__token__"

        async with AsyncClient(url=BASE_URL, auth=auth) as client:
            await client.execute(resource="user", id=1337, action="update", auth=True)

    async def test_auth_flag_is_not_a_parameter(self) -> None:
        """Test that the auth flag is never transmitted."""
        transport = AsyncRecordingTransport()

        async def auth(request: RequestSpec) -> None:
            return None

        client = AsyncClient(url=BASE_URL, auth=auth, transport=transport)
        await client.execute(resource="user", auth=True)

        assert transport.requests[0].url == "http://api.example.com/user/"

    async def test_sync_handler_supported(self) -> None:
        """Test that plain functions work as handlers too."""
        transport = AsyncRecordingTransport()

        def auth(request: RequestSpec) -> RequestSpec:
            return request.model_copy(update={"http_headers": {"X-Token": "t"}})

        client = AsyncClient(url=BASE_URL, auth=auth, transport=transport)
        await client.execute(resource="user", auth=True)

        assert transport.requests[0].headers == {"X-Token": "t"}

    async def test_missing_handler(self) -> None:
        """Test that auth requests fail without a handler."""
        transport = AsyncRecordingTransport()
        client = AsyncClient(url=BASE_URL, transport=transport)

        with pytest.raises(AuthError, match="Auth requests require an auth handler"):
            await client.execute(resource="user", auth=True)

        assert transport.requests == []

    async def test_handler_errors_propagate(self) -> None:
        """Test that handler exceptions are not rewritten."""
        transport = AsyncRecordingTransport()

        async def auth(request: RequestSpec) -> None:
            raise PermissionError("token expired")

        client = AsyncClient(url=BASE_URL, auth=auth, transport=transport)

        with pytest.raises(PermissionError, match="token expired"):
            await client.execute(resource="user", auth=True)

        assert transport.requests == []
