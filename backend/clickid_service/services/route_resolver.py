"""Derive the (domain, route) pair used for campaign lookup."""

from urllib.parse import urlsplit

# First path segment of this service's own endpoint
ENDPOINT_SEGMENT = "clickid"


def _first_segment(path: str) -> str:
    return path.lstrip("/").split("/", 1)[0]


def _is_own_endpoint(route: str) -> bool:
    # "clickid.php", "index.html" etc. are files, not logical routes
    return not route or "." in route or route == ENDPOINT_SEGMENT


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def resolve_domain_and_route(host: str, path: str, referrer: str | None) -> tuple[str, str]:
    """Return ``(domain, route)``; both may be empty, never raises."""
    domain = strip_www(host or "")
    route = _first_segment(path or "")

    if _is_own_endpoint(route) and referrer:
        try:
            route = _first_segment(urlsplit(referrer).path)
        except ValueError:
            route = ""

    return domain, route
