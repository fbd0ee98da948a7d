"""Persist a freshly minted click id and hand it to the browser."""

import logging
from typing import Protocol

from clickid_service.core.config import Settings
from clickid_service.services.session_cache import Session, remember_clickid
from clickid_service.services.session_store import SESSION_STORE_ERRORS, SessionStore

logger = logging.getLogger(__name__)


class CookieWriter(Protocol):
    """Anything with Starlette's ``Response.set_cookie`` signature."""

    def set_cookie(
        self,
        key: str,
        value: str = "",
        max_age: int | None = None,
        expires=None,
        path: str | None = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = False,
        samesite: str | None = "lax",
    ) -> None: ...


def set_clickid_cookie(
    cookies: CookieWriter, settings: Settings, clickid: str, secure: bool
) -> None:
    # Not HttpOnly: the provider's client-side script reads it
    cookies.set_cookie(
        settings.CLICKID_COOKIE_NAME,
        clickid,
        max_age=settings.CLICKID_COOKIE_MAX_AGE,
        expires=settings.CLICKID_COOKIE_MAX_AGE,
        path="/",
        secure=secure,
        httponly=False,
        samesite="lax",
    )


def set_session_cookie(
    cookies: CookieWriter, settings: Settings, session_id: str, secure: bool
) -> None:
    cookies.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session_id,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


async def write_minted_clickid(
    store: SessionStore,
    session: Session,
    cookies: CookieWriter,
    settings: Settings,
    *,
    clickid: str,
    now: int,
    secure: bool,
) -> None:
    remember_clickid(session, clickid, now)
    try:
        await store.save(session.id, session.data, settings.SESSION_MAX_AGE)
    except SESSION_STORE_ERRORS as exc:
        # the id is already minted; the cookie still carries it
        logger.warning("Session save failed, click id not cached: %s", exc)
    set_clickid_cookie(cookies, settings, clickid, secure)
