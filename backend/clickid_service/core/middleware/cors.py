"""Fixed CORS headers for the click id endpoint.

Starlette's CORSMiddleware answers preflights itself with a 200 body, while
embedding pages expect a bare 204 from OPTIONS and the same header set on
every response, so the headers are stamped here instead. The header set is
built from settings once, in ``main.py``, and kept on ``app.state``.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from clickid_service.core.config import Settings

ALLOWED_METHODS = ("POST", "GET", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type",)


def get_cors_headers(cfg: Settings) -> dict[str, str]:
    """Return the CORS headers sent with every response."""
    return {
        "Access-Control-Allow-Origin": cfg.ALLOWED_ORIGIN,
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
    }


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(request.app.state.cors_headers)
        return response
