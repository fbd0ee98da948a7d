"""FastAPI dependency chain: settings -> clients/store -> handler, session."""

import logging

import httpx
from fastapi import Depends, Request, Response

from clickid_service.core.config import Settings, settings
from clickid_service.services.clickid_handler import ClickIdHandler
from clickid_service.services.response_writer import set_session_cookie
from clickid_service.services.session_cache import Session
from clickid_service.services.session_store import (
    SESSION_STORE_ERRORS,
    SessionStore,
    is_valid_session_id,
    new_session_id,
)

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    return settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_lookup_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.lookup_client


def get_mint_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.mint_client


def get_clickid_handler(
    cfg: Settings = Depends(get_settings),
    lookup_client: httpx.AsyncClient = Depends(get_lookup_client),
    mint_client: httpx.AsyncClient = Depends(get_mint_client),
) -> ClickIdHandler:
    return ClickIdHandler(cfg, lookup_client, mint_client)


async def get_session(
    request: Request,
    response: Response,
    cfg: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> Session:
    """Load the browser session, starting a new one when the cookie is missing/bad.

    A new session only gets its cookie here; data is written when a click id
    is minted.
    """
    session_id = request.cookies.get(cfg.SESSION_COOKIE_NAME)
    if is_valid_session_id(session_id):
        try:
            data = await store.load(session_id)
        except SESSION_STORE_ERRORS as exc:
            logger.warning("Session load failed, treating as empty: %s", exc)
            data = {}
        return Session(id=session_id, data=data)

    session = Session(id=new_session_id())
    set_session_cookie(response, cfg, session.id, secure=request.url.scheme == "https")
    return session
