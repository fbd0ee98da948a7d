"""Click id minting against the tracking provider.

Mint URL shape::

    {MINT_BASE_URL}/{campaign_id}?format=json&referrer={page url}&{page query}

The landing page's own query string is forwarded as top-level parameters so
the provider can attribute ``sub1``..``sub10`` and UTM values. Only ``cost``
and ``ref_id`` are dropped.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

import httpx
from starlette.datastructures import Headers

from clickid_service.core.config import Settings

logger = logging.getLogger(__name__)

STRIPPED_PARAMS = frozenset({"cost", "ref_id"})


class MintError(Exception):
    """Minting failed; carries what the envelope reports back."""

    def __init__(
        self,
        error: str,
        *,
        url: str,
        status: int | None = None,
        detail: str | None = None,
        raw: Any = None,
    ):
        super().__init__(error)
        self.error = error
        self.url = url
        self.status = status
        self.detail = detail
        self.raw = raw


@dataclass(frozen=True)
class MintRequest:
    campaign_id: str
    referrer: str
    forwarded_params: list[tuple[str, str]]

    @classmethod
    def from_referrer(cls, campaign_id: str, referrer: str) -> "MintRequest":
        params: list[tuple[str, str]] = []
        if referrer:
            try:
                query = urlsplit(referrer).query
            except ValueError:
                query = ""
            params = [
                (k, v)
                for k, v in parse_qsl(query, keep_blank_values=True)
                if k not in STRIPPED_PARAMS
            ]
        return cls(campaign_id=campaign_id, referrer=referrer, forwarded_params=params)

    def url(self, base_url: str) -> str:
        url = f"{base_url.rstrip('/')}/{quote(self.campaign_id, safe='')}?format=json"
        if self.referrer:
            url += "&referrer=" + quote(self.referrer, safe="")
            if self.forwarded_params:
                url += "&" + urlencode(self.forwarded_params)
        return url


def build_mint_url(base_url: str, campaign_id: str, referrer: str) -> str:
    return MintRequest.from_referrer(campaign_id, referrer).url(base_url)


def resolve_client_ip(headers: Headers, remote_addr: str | None) -> str:
    """CDN connecting IP, then first X-Forwarded-For hop, then the socket peer."""
    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return remote_addr or ""


def build_mint_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client for the provider (long timeouts, TLS verified)."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.MINT_TIMEOUT, connect=settings.MINT_CONNECT_TIMEOUT),
        verify=True,
    )


async def mint_clickid(
    client: httpx.AsyncClient,
    url: str,
    *,
    user_agent: str,
    client_ip: str,
) -> str:
    """Call the mint URL and return the click id, or raise MintError."""
    headers = {
        "Accept": "application/json",
        "User-Agent": user_agent,
        "X-Forwarded-For": client_ip,
        "X-Real-IP": client_ip,
    }
    try:
        resp = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        detail = str(exc) or type(exc).__name__
        logger.error("Click mint request failed: %s for URL: %s", detail, url)
        raise MintError("Click mint request failed", url=url, detail=detail) from exc

    if resp.status_code != 200:
        logger.error("Click mint request failed: HTTP %s for URL: %s", resp.status_code, url)
        raise MintError(
            "Click mint request failed",
            url=url,
            status=resp.status_code,
            detail=f"HTTP {resp.status_code}",
        )

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    clickid = payload.get("clickid") if isinstance(payload, dict) else None
    if not clickid or not isinstance(clickid, str):
        logger.warning("No clickid in provider response for URL: %s. Response: %r", url, payload)
        raise MintError("No clickid in JSON", url=url, raw=payload)

    return clickid
