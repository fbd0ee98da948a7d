"""Per-session click id cache (6h TTL by default)."""

from dataclasses import dataclass, field
from typing import Any

SESSION_KEY = "rt_clickid"
SESSION_TS_KEY = SESSION_KEY + "_ts"


@dataclass
class Session:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


def get_cached_clickid(session: Session, now: int, ttl: int) -> str | None:
    """Return the cached click id if present and younger than ``ttl`` seconds."""
    clickid = session.data.get(SESSION_KEY)
    ts = session.data.get(SESSION_TS_KEY)
    if not clickid or not ts:
        return None
    try:
        age = now - int(ts)
    except (TypeError, ValueError):
        return None
    if age >= ttl:
        return None
    return str(clickid)


def remember_clickid(session: Session, clickid: str, now: int) -> None:
    session.data[SESSION_KEY] = clickid
    session.data[SESSION_TS_KEY] = now
