"""Shared helpers: fake upstream services and Set-Cookie parsing."""

from collections.abc import Callable
from typing import Any

import httpx

LOOKUP_HOST = "lookup.test"
MINT_HOST = "mint.test"
LOOKUP_BASE = f"http://{LOOKUP_HOST}"
MINT_BASE = f"https://{MINT_HOST}"
DEFAULT_CAMPAIGN = "default-cmp-000"

Responder = Callable[[httpx.Request], httpx.Response]


def reply(status: int = 200, json: Any = None, content: bytes | None = None) -> Responder:
    """Build a fresh httpx.Response per call (responses are single-use)."""

    def _respond(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status, content=content)
        return httpx.Response(status, json=json)

    return _respond


def raising(exc_type: type[httpx.RequestError], message: str = "timed out") -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        raise exc_type(message, request=request)

    return _respond


def route_data(rtk_id: Any, success: bool = True) -> Responder:
    return reply(200, {"success": success, "routeData": {"rtkID": rtk_id, "domain": "x"}})


class FakeUpstream:
    """MockTransport handler standing in for the lookup API and the provider."""

    def __init__(self) -> None:
        self.lookup: Responder = route_data("cmp-123")
        self.mint: Responder = reply(200, {"clickid": "abc123"})
        self.calls: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if request.url.host == LOOKUP_HOST:
            return self.lookup(request)
        if request.url.host == MINT_HOST:
            return self.mint(request)
        return httpx.Response(404)

    @property
    def lookup_calls(self) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.host == LOOKUP_HOST]

    @property
    def mint_calls(self) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.host == MINT_HOST]


def set_cookies(response: httpx.Response) -> dict[str, str]:
    """Map cookie name -> full Set-Cookie header value."""
    cookies = {}
    for header in response.headers.get_list("set-cookie"):
        name = header.split("=", 1)[0].strip()
        cookies[name] = header
    return cookies


def cookie_value(response: httpx.Response, name: str) -> str | None:
    header = set_cookies(response).get(name)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1]
