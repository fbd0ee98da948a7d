"""JSON envelope error handling.

Callers are page scripts that always parse the body, so errors keep the
``{"ok": false, "error": ...}`` shape instead of HTML or problem+json.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clickid_service.schemas.clickid import ClickIdResponse

logger = logging.getLogger(__name__)


class EnvelopeJSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def error_envelope(error: str) -> dict:
    return ClickIdResponse(ok=False, error=error).model_dump(exclude_unset=True)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return EnvelopeJSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.detail if isinstance(exc.detail, str) else "Error"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort boundary: log the traceback, answer 200 with a JSON error.

    Runs outside the user middleware stack, so CORS headers are added here.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return EnvelopeJSONResponse(
        status_code=200,
        content=error_envelope("Unexpected server error"),
        headers=request.app.state.cors_headers,
    )
