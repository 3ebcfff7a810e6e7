"""Serving models — what the resolver returns for a request."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
CACHE_HTML = "no-cache, no-store, must-revalidate"
CACHE_IMMUTABLE = "public, max-age=31536000, immutable"


class ServedContent(BaseModel):
    """Bytes plus the headers a serving layer needs to emit them."""

    model_config = ConfigDict(frozen=True)

    body: bytes
    content_type: str
    cache_control: str
    path: str  # path inside the artifact that was actually served
    fallback: bool = False  # True when index.html was served for a missing path

    @property
    def is_html(self) -> bool:
        return self.content_type.startswith("text/html")
