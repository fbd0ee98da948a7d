"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from clickid_service.api.v1.clickid import router as clickid_router
from clickid_service.api.v1.router import api_v1_router
from clickid_service.core.config import settings
from clickid_service.core.exceptions import (
    http_exception_handler,
    unhandled_exception_handler,
)
from clickid_service.core.logging import configure_logging
from clickid_service.core.middleware.cors import CorsHeadersMiddleware, get_cors_headers
from clickid_service.core.middleware.request_id import RequestIdMiddleware
from clickid_service.services.campaign_lookup import build_lookup_client
from clickid_service.services.minter import build_mint_client
from clickid_service.services.session_store import build_session_store

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.session_store = build_session_store(settings)
    app.state.lookup_client = build_lookup_client(settings)
    app.state.mint_client = build_mint_client(settings)
    try:
        yield
    finally:
        await app.state.mint_client.aclose()
        await app.state.lookup_client.aclose()
        await app.state.session_store.close()


app = FastAPI(
    title="Click ID Service",
    version="0.1.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.cors_headers = get_cors_headers(settings)

# Middleware (last added = first executed)
app.add_middleware(CorsHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

# Exception handlers (JSON envelope)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Routes
app.include_router(api_v1_router, prefix="/api/v1")
app.include_router(clickid_router, tags=["clickid"])
