"""Click id request/response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClickIdRequest(BaseModel):
    """Body sent by the embedding page (form or JSON).

    Only ``referrer`` is read; ``qs``, ``fbp`` and ``fbc`` are accepted so
    existing snippets keep validating.
    """

    model_config = ConfigDict(extra="ignore")

    referrer: str | None = Field(None, max_length=8192)
    qs: str | None = None
    fbp: str | None = None
    fbc: str | None = None


class ClickIdDebug(BaseModel):
    domain: str
    route: str
    rtkID: str | None
    fallback: bool


class ClickIdResponse(BaseModel):
    """Envelope returned for every GET/POST. Unset fields are omitted."""

    ok: bool
    clickid: str | None = None
    cached: bool | None = None
    ref: str | None = None
    mint_url: str | None = None
    error: str | None = None
    status: int | None = None
    detail: str | None = None
    url: str | None = None
    raw: Any = None
    debug: ClickIdDebug | None = None
