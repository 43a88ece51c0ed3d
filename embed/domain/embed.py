import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse


@dataclass
class Embed:
    id: str
    title: str
    url: str
    thumbnail_url: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    embed_enabled: bool = False
    created_at: Optional[datetime] = None


def derive_fallback_preview(value: str) -> str:
    parsed = urlparse(value.strip())
    if not parsed.scheme or not parsed.netloc:
        return "Open link for preview details."
    host = re.sub(r"^www\.", "", parsed.hostname or "", flags=re.IGNORECASE)
    path = "" if parsed.path in ("", "/") else parsed.path.rstrip("/")
    return f"{host}{path}"
