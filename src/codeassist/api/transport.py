"""HTTP transport for Code Assist calls.

The server only depends on the ``Transport`` protocol; ``HttpxTransport`` is
the default implementation on top of ``httpx.AsyncClient``.
"""

import asyncio
import json
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from codeassist.api.errors import RequestCancelledError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class HttpRequest:
    """One HTTP request as issued by the server."""

    url: str
    method: str
    headers: dict[str, str]
    params: dict[str, str] | None = None
    body: str | None = None


class LineStream(Protocol):
    """An open streamed response."""

    def lines(self) -> AsyncIterator[str]: ...

    async def aclose(self) -> None: ...


class Transport(Protocol):
    """Authenticated HTTP request executor."""

    async def request(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> Any:
        """Send a unary request and return the parsed JSON body."""
        ...

    async def open_stream(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> LineStream:
        """Send a request and return its body as a line stream.

        Non-2xx responses raise before returning.
        """
        ...


class BearerTokenAuth(httpx.Auth):
    """Adds ``Authorization: Bearer <token>`` to each request."""

    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


async def _race_signal[T](
    call: Callable[[], Awaitable[T]], signal: asyncio.Event | None
) -> T:
    """Run ``call`` unless ``signal`` fires first.

    Raises:
        RequestCancelledError: If the signal is (or becomes) set first.
    """
    if signal is None:
        return await call()
    if signal.is_set():
        raise RequestCancelledError("Request cancelled before it was sent")

    call_task = asyncio.ensure_future(call())
    signal_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {call_task, signal_task}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        call_task.cancel()
        raise
    finally:
        signal_task.cancel()

    if call_task in done:
        return call_task.result()

    call_task.cancel()
    try:
        await call_task
    except asyncio.CancelledError:
        pass
    raise RequestCancelledError("Request cancelled")


def _error_data(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise TransportError(
        f"Request failed with status {response.status_code}: {response.request.url}",
        status_code=response.status_code,
        url=str(response.request.url),
        response_data=_error_data(response),
    )


class HttpxLineStream:
    """Line stream over an open ``httpx`` streaming response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def lines(self) -> AsyncIterator[str]:
        # aiter_lines splits on \n, \r\n and \r and strips the terminators
        return self._response.aiter_lines()

    async def aclose(self) -> None:
        await self._response.aclose()


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        auth: httpx.Auth | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._auth = auth

    def _build(self, req: HttpRequest) -> httpx.Request:
        return self._client.build_request(
            req.method,
            req.url,
            headers=req.headers,
            params=req.params,
            content=req.body,
        )

    async def request(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> Any:
        start_time = time.monotonic()
        response = await _race_signal(
            lambda: self._client.send(
                self._build(req), auth=self._auth or httpx.USE_CLIENT_DEFAULT
            ),
            signal,
        )
        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug(
            "%s %s -> %d (%dms)", req.method, req.url, response.status_code, duration_ms
        )
        _raise_for_status(response)
        return response.json()

    async def open_stream(
        self, req: HttpRequest, *, signal: asyncio.Event | None = None
    ) -> HttpxLineStream:
        response = await _race_signal(
            lambda: self._client.send(
                self._build(req),
                auth=self._auth or httpx.USE_CLIENT_DEFAULT,
                stream=True,
            ),
            signal,
        )
        logger.debug("%s %s -> %d (stream)", req.method, req.url, response.status_code)
        if not response.is_success:
            try:
                await response.aread()
            finally:
                await response.aclose()
            _raise_for_status(response)
        return HttpxLineStream(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
