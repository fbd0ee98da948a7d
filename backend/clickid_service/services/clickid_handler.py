"""Click id flow: route -> campaign -> session cache -> mint -> respond.

Every outcome is an ``ok``/``error`` envelope served with HTTP 200 so the
embedding page never has to deal with a failed fetch.
"""

import logging
import time
from dataclasses import dataclass

import httpx
from starlette.requests import Request

from clickid_service.core.config import Settings
from clickid_service.schemas.clickid import ClickIdDebug, ClickIdRequest, ClickIdResponse
from clickid_service.services.campaign_lookup import resolve_campaign_id
from clickid_service.services.minter import (
    MintError,
    build_mint_url,
    mint_clickid,
    resolve_client_ip,
)
from clickid_service.services.response_writer import CookieWriter, write_minted_clickid
from clickid_service.services.route_resolver import resolve_domain_and_route
from clickid_service.services.session_cache import Session, get_cached_clickid
from clickid_service.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClickIdContext:
    """What the flow needs from the inbound request."""

    scheme: str
    host: str
    path: str
    query: str
    referer_header: str | None
    body_referrer: str | None
    user_agent: str | None
    client_ip: str

    @classmethod
    def from_request(cls, request: Request, body: ClickIdRequest) -> "ClickIdContext":
        return cls(
            scheme=request.url.scheme,
            host=request.headers.get("host", ""),
            path=request.url.path,
            query=request.url.query,
            referer_header=request.headers.get("referer"),
            body_referrer=body.referrer,
            user_agent=request.headers.get("user-agent"),
            client_ip=resolve_client_ip(
                request.headers, request.client.host if request.client else None
            ),
        )

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"

    @property
    def page_referrer(self) -> str | None:
        return self.body_referrer or self.referer_header

    @property
    def self_url(self) -> str:
        url = f"{self.scheme}://{self.host}{self.path}"
        return f"{url}?{self.query}" if self.query else url


class ClickIdHandler:
    def __init__(
        self,
        settings: Settings,
        lookup_client: httpx.AsyncClient,
        mint_client: httpx.AsyncClient,
    ):
        self.settings = settings
        self.lookup_client = lookup_client
        self.mint_client = mint_client

    async def handle(
        self,
        ctx: ClickIdContext,
        session: Session,
        store: SessionStore,
        cookies: CookieWriter,
    ) -> ClickIdResponse:
        domain, route = resolve_domain_and_route(ctx.host, ctx.path, ctx.page_referrer)
        campaign_id, used_fallback = await resolve_campaign_id(
            self.lookup_client, self.settings, domain, route
        )
        logger.info(
            "Resolved rtkID=%s for domain=%s route=%s (fallback=%s)",
            campaign_id,
            domain,
            route,
            used_fallback,
        )
        debug = ClickIdDebug(domain=domain, route=route, rtkID=campaign_id, fallback=used_fallback)
        referrer = ctx.page_referrer or ctx.self_url
        now = int(time.time())

        cached = get_cached_clickid(session, now, self.settings.CLICKID_TTL_SECONDS)
        if cached:
            return ClickIdResponse(
                ok=True, clickid=cached, cached=True, ref=referrer, mint_url=None, debug=debug
            )

        if campaign_id is None:
            return ClickIdResponse(
                ok=False,
                error="rtkID is null - tracking disabled",
                ref=referrer,
                debug=debug,
            )

        mint_url = build_mint_url(self.settings.MINT_BASE_URL, campaign_id, referrer)
        try:
            clickid = await mint_clickid(
                self.mint_client,
                mint_url,
                user_agent=ctx.user_agent or self.settings.DEFAULT_USER_AGENT,
                client_ip=ctx.client_ip,
            )
        except MintError as exc:
            return self._mint_failure(exc, referrer, debug)

        await write_minted_clickid(
            store,
            session,
            cookies,
            self.settings,
            clickid=clickid,
            now=now,
            secure=ctx.is_secure,
        )
        logger.info("Minted clickid for domain=%s route=%s rtkID=%s", domain, route, campaign_id)
        return ClickIdResponse(
            ok=True, clickid=clickid, cached=False, ref=referrer, mint_url=mint_url, debug=debug
        )

    @staticmethod
    def _mint_failure(exc: MintError, referrer: str, debug: ClickIdDebug) -> ClickIdResponse:
        if exc.detail is not None:
            # transport error or non-200 from the provider
            return ClickIdResponse(
                ok=False,
                error=exc.error,
                status=exc.status,
                detail=exc.detail,
                url=exc.url,
                ref=referrer,
                debug=debug,
            )
        return ClickIdResponse(
            ok=False, error=exc.error, url=exc.url, raw=exc.raw, ref=referrer, debug=debug
        )
