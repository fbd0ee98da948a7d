"""Health check endpoint."""

from fastapi import APIRouter, Depends

from clickid_service.core.dependencies import get_session_store
from clickid_service.services.session_store import SessionStore

router = APIRouter()

VERSION = "0.1.0"


@router.get("/health")
async def health_check(store: SessionStore = Depends(get_session_store)):
    """Check session store connectivity."""
    sessions_status = "ok" if await store.ping() else "error"

    status = "ok" if sessions_status == "ok" else "degraded"
    return {
        "status": status,
        "sessions": sessions_status,
        "version": VERSION,
    }
