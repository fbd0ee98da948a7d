"""Campaign id resolution against the internal domain-route-details API.

Every failure mode funnels into the configured default campaign id; nothing
raises out of ``resolve_campaign_id``. An explicit ``rtkID: null`` is not a
failure: it means tracking is disabled for that route.
"""

import logging
from typing import NamedTuple

import httpx

from clickid_service.core.config import Settings

logger = logging.getLogger(__name__)

LOOKUP_PATH = "/api/v1/domain-route-details"


class CampaignResolution(NamedTuple):
    campaign_id: str | None
    used_fallback: bool


def build_lookup_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client for the lookup service (short timeouts, no TLS verification)."""
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL.rstrip("/"),
        timeout=httpx.Timeout(settings.LOOKUP_TIMEOUT, connect=settings.LOOKUP_CONNECT_TIMEOUT),
        verify=settings.LOOKUP_VERIFY_TLS,
        headers={"Accept": "application/json"},
    )


async def fetch_route_data(client: httpx.AsyncClient, domain: str, route: str) -> dict | None:
    """GET the route details; returns the decoded body or None on any failure."""
    try:
        resp = await client.get(LOOKUP_PATH, params={"domain": domain, "route": route})
    except httpx.HTTPError as exc:
        logger.warning(
            "Route lookup failed for domain=%s route=%s: %s",
            domain,
            route,
            str(exc) or type(exc).__name__,
        )
        return None

    if resp.status_code != 200:
        logger.warning(
            "Route lookup failed for domain=%s route=%s: HTTP %s", domain, route, resp.status_code
        )
        return None

    try:
        data = resp.json()
    except ValueError:
        logger.warning("Route lookup returned malformed JSON for domain=%s route=%s", domain, route)
        return None

    return data if isinstance(data, dict) else None


async def resolve_campaign_id(
    client: httpx.AsyncClient,
    settings: Settings,
    domain: str,
    route: str,
) -> CampaignResolution:
    fallback = CampaignResolution(settings.DEFAULT_CAMPAIGN_ID, True)

    if not domain or not route:
        return fallback

    data = await fetch_route_data(client, domain, route)
    if data is None or not data.get("success"):
        return fallback

    route_data = data.get("routeData")
    if not isinstance(route_data, dict) or "rtkID" not in route_data:
        logger.warning("Route lookup for domain=%s route=%s has no rtkID", domain, route)
        return fallback

    campaign_id = route_data["rtkID"]
    if campaign_id is None:
        return CampaignResolution(None, False)
    if not isinstance(campaign_id, str) or not campaign_id:
        logger.warning(
            "Unusable rtkID %r for domain=%s route=%s, using default", campaign_id, domain, route
        )
        return fallback

    return CampaignResolution(campaign_id, False)
