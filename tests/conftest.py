"""Shared fixtures: a mock LNURL-pay server behind an httpx transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

CALLBACK_URL = "https://wallet.example.com/lnurlp/callback"

PAY_RESPONSE = {
    "callback": CALLBACK_URL,
    "minSendable": 1000,
    "maxSendable": 5000,
    "metadata": json.dumps([["text/plain", "Pay alice"], ["text/identifier", "alice@wallet.example.com"]]),
    "tag": "payRequest",
    "commentAllowed": 10,
}

INVOICE = "lnbc30n1" + "p" + "qpzry9x8gf2tvdw0s3jn54khce6mua7l" * 4


class MockLnurlTransport(httpx.AsyncBaseTransport):
    """Simulates a Lightning Address provider: discovery + callback."""

    def __init__(
        self,
        pay_response: dict | str | None = None,
        callback_response: dict | str | None = None,
        discovery_status: int = 200,
        callback_status: int = 200,
    ):
        self.pay_response = PAY_RESPONSE if pay_response is None else pay_response
        self.callback_response = (
            {"pr": INVOICE, "routes": []} if callback_response is None else callback_response
        )
        self.discovery_status = discovery_status
        self.callback_status = callback_status
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _respond(status: int, body: dict | str) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path.startswith("/.well-known/lnurlp/"):
            return self._respond(self.discovery_status, self.pay_response)

        if request.url.path == "/lnurlp/callback":
            return self._respond(self.callback_status, self.callback_response)

        return httpx.Response(404)

    @property
    def discovery_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/.well-known/")]

    @property
    def callback_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/lnurlp/callback"]


class TimeoutTransport(httpx.AsyncBaseTransport):
    """Every request times out."""

    def __init__(self):
        self.request_count = 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.request_count += 1
        raise httpx.ReadTimeout("timed out", request=request)


class ConnectErrorTransport(httpx.AsyncBaseTransport):
    """Every request fails to connect (DNS / refused)."""

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)


class TricklingStream(httpx.AsyncByteStream):
    """Body that arrives one byte at a time, never stalling long enough for a read timeout."""

    def __init__(self, chunks: int = 100, delay: float = 0.05):
        self.chunks = chunks
        self.delay = delay

    async def __aiter__(self):
        for _ in range(self.chunks):
            await asyncio.sleep(self.delay)
            yield b" "


class TricklingTransport(httpx.AsyncBaseTransport):
    """Every response body trickles in slowly."""

    def __init__(self):
        self.request_count = 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.request_count += 1
        return httpx.Response(
            200, headers={"Content-Type": "application/json"}, stream=TricklingStream()
        )


@pytest.fixture
def lnurl_transport() -> MockLnurlTransport:
    return MockLnurlTransport()


@pytest.fixture
def make_transport():
    """Factory for transports with custom responses."""
    return MockLnurlTransport


@pytest.fixture
def timeout_transport() -> TimeoutTransport:
    return TimeoutTransport()


@pytest.fixture
def connect_error_transport() -> ConnectErrorTransport:
    return ConnectErrorTransport()


@pytest.fixture
def trickling_transport() -> TricklingTransport:
    return TricklingTransport()


@pytest.fixture
def invoice() -> str:
    return INVOICE
