"""Public click id endpoint, called from landing pages.

    fetch('/clickid', {method: 'POST', credentials: 'include',
                       body: new URLSearchParams({referrer: location.href})})

Served at ``/clickid`` and ``/clickid.php`` (legacy snippets), optionally
below one route prefix such as ``/landing/clickid.php``.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from clickid_service.core.dependencies import (
    get_clickid_handler,
    get_session,
    get_session_store,
)
from clickid_service.core.exceptions import EnvelopeJSONResponse
from clickid_service.schemas.clickid import ClickIdRequest, ClickIdResponse
from clickid_service.services.clickid_handler import ClickIdContext, ClickIdHandler
from clickid_service.services.session_cache import Session
from clickid_service.services.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

CLICKID_PATHS = ("/clickid", "/clickid.php", "/{prefix}/clickid", "/{prefix}/clickid.php")


async def read_clickid_body(request: Request) -> ClickIdRequest:
    """Parse the optional form/JSON body; anything unreadable counts as empty."""
    if request.method != "POST":
        return ClickIdRequest()

    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            raw = await request.json()
        else:
            raw = dict(await request.form())
        return ClickIdRequest.model_validate(raw if isinstance(raw, dict) else {})
    except (ValueError, StarletteHTTPException) as exc:
        logger.warning("Ignoring unreadable click id request body: %s", exc)
        return ClickIdRequest()


async def get_clickid(
    request: Request,
    response: Response,
    handler: ClickIdHandler = Depends(get_clickid_handler),
    session: Session = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
) -> ClickIdResponse:
    """Return the session's click id, minting one when none is cached.

    Always HTTP 200; failures are reported with ``ok: false``.
    """
    body = await read_clickid_body(request)
    ctx = ClickIdContext.from_request(request, body)
    return await handler.handle(ctx, session, store, response)


async def clickid_preflight() -> Response:
    return Response(status_code=204)


for _path in CLICKID_PATHS:
    router.add_api_route(
        _path,
        get_clickid,
        methods=["GET", "POST"],
        response_model=ClickIdResponse,
        response_model_exclude_unset=True,
        response_class=EnvelopeJSONResponse,
    )
    router.add_api_route(_path, clickid_preflight, methods=["OPTIONS"], status_code=204)
