# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
HTTP transport backed by httpx.

HttpxTransport performs each attempt with an ``httpx.AsyncClient``,
streaming the response body so progress can be reported per chunk. The
client is created lazily unless one is injected, which also makes the
transport easy to drive with ``httpx.MockTransport`` in tests.

Requires the 'http' extra:
    pip install priority-request-queue[http]
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..exceptions import ConstructionError, NetworkFailure
from ..types.options import ProgressCallback
from ..types.response import ProgressEvent, TransportResponse
from .base import BaseTransport, TransportHandle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpxTransport(BaseTransport):
    """
    Transport performing attempts over HTTP with httpx.

    Attributes:
        timeout: Per-attempt timeout in seconds, used when the transport
            creates its own client. A timeout surfaces as NetworkFailure.

    Example:
        async with HttpxTransport(timeout=10.0) as transport:
            async with RequestQueue(transport=transport) as queue:
                data = await queue.get(url, response_type="json")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        follow_redirects: bool = True,
        **client_kwargs: Any,
    ) -> None:
        """
        Initialize the transport.

        Args:
            client: Existing client to use. The transport does not close it.
            timeout: Timeout for a client created by the transport
            follow_redirects: Redirect policy for a client created by the transport
            **client_kwargs: Extra arguments for a client created by the transport
        """
        super().__init__()
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self._follow_redirects = follow_redirects
        self._client_kwargs = client_kwargs

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self._follow_redirects,
                **self._client_kwargs,
            )
        return self._client

    def open(
        self, method: str, url: str, with_credentials: bool = False
    ) -> TransportHandle:
        if self._client is not None and self._client.is_closed:
            raise ConstructionError("The underlying httpx client is closed")
        return super().open(method, url, with_credentials)

    async def _perform(
        self,
        handle: TransportHandle,
        body: Any,
        headers: Mapping[str, str],
        on_progress: ProgressCallback | None,
    ) -> TransportResponse:
        request = self.client.build_request(
            handle.method, handle.url, content=body, headers=dict(headers)
        )
        response = await self._send_following_redirects(request, handle)

        try:
            content = await self._read_body(response, handle, on_progress)
        finally:
            await response.aclose()

        logger.debug(
            f"{handle.method} {handle.url} -> {response.status_code} ({len(content)} bytes)"
        )
        return TransportResponse(
            status_code=response.status_code,
            content=content,
            headers=dict(response.headers),
        )

    async def _send_following_redirects(
        self, request: httpx.Request, handle: TransportHandle
    ) -> httpx.Response:
        """
        Send ``request`` and follow redirects hop by hop.

        httpx rebuilds every redirect request from the client's cookie jar,
        so the Cookie header is stripped on each hop when the attempt does
        not carry credentials.
        """
        client = self.client
        hops = 0
        while True:
            if not handle.with_credentials:
                request.headers.pop("cookie", None)
            try:
                response = await client.send(request, stream=True, follow_redirects=False)
            except httpx.RequestError as e:
                raise NetworkFailure(str(e) or type(e).__name__, url=handle.url) from e

            next_request = response.next_request
            if not client.follow_redirects or next_request is None:
                return response
            await response.aclose()

            hops += 1
            if hops > client.max_redirects:
                raise NetworkFailure(
                    f"Exceeded {client.max_redirects} redirects", url=handle.url
                )
            logger.debug(f"{handle.method} {request.url} redirected to {next_request.url}")
            request = next_request

    async def _read_body(
        self,
        response: httpx.Response,
        handle: TransportHandle,
        on_progress: ProgressCallback | None,
    ) -> bytes:
        total: int | None = None
        content_length = response.headers.get("content-length")
        # Content-Length counts encoded bytes, aiter_bytes yields decoded ones
        if (
            content_length
            and content_length.isdigit()
            and "content-encoding" not in response.headers
        ):
            total = int(content_length)

        chunks: list[bytes] = []
        loaded = 0
        try:
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)
                loaded += len(chunk)
                if on_progress is not None:
                    on_progress(ProgressEvent(loaded=loaded, total=total))
        except httpx.RequestError as e:
            raise NetworkFailure(str(e) or type(e).__name__, url=handle.url) from e
        return b"".join(chunks)

    async def aclose(self) -> None:
        await super().aclose()
        if self._owns_client and self._client is not None:
            await self._client.aclose()


__all__ = ["DEFAULT_TIMEOUT", "HttpxTransport"]
