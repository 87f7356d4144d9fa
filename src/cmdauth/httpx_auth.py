"""``httpx`` integration: attach the provider's header to outgoing requests.

Example::

    provider = CredentialProvider("/usr/local/bin/get-token")
    with httpx.Client(auth=CommandAuth(provider)) as client:
        client.get("https://api.example.com/things")

With :class:`httpx.AsyncClient` the refresh command runs in a worker
thread, so the event loop keeps running while it executes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Generator

import anyio.to_thread
import httpx

from .provider import CredentialProvider


class CommandAuth(httpx.Auth):
    """:class:`httpx.Auth` flow backed by a :class:`CredentialProvider`.

    Requests pass through untouched when the provider has no refresh
    command.  Refresh errors propagate out of the request call.
    """

    def __init__(self, provider: CredentialProvider) -> None:
        self.provider = provider

    @staticmethod
    def _apply(request: httpx.Request, header: tuple[str, str] | None) -> None:
        if header is not None:
            name, value = header
            request.headers[name] = value

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self._apply(request, self.provider.access_header())
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        header = await anyio.to_thread.run_sync(self.provider.access_header)
        self._apply(request, header)
        yield request
