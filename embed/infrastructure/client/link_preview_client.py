import logging
from typing import Optional

import requests

from config.settings import EmbedSettings
from embed.application.port.link_preview_port import LinkPreviewPort
from embed.domain.embed import derive_fallback_preview

logger = logging.getLogger(__name__)

PREVIEW_SEPARATOR = " • "


class LinkPreviewClient(LinkPreviewPort):
    """
    microlink -> noembed -> URL 기반 대체 문구 순서로 링크 설명을 찾는다.
    """

    def __init__(self, settings: EmbedSettings | None = None, session: requests.Session | None = None):
        self.settings = settings or EmbedSettings()
        self.session = session or requests.Session()

    def fetch_preview(self, url: str) -> str:
        return self._from_microlink(url) or self._from_noembed(url) or derive_fallback_preview(url)

    def _from_microlink(self, url: str) -> Optional[str]:
        payload = self._get_json(self.settings.microlink_url, url)
        data = (payload or {}).get("data") or {}
        for key in ("description", "title"):
            value = (data.get(key) or "").strip()
            if value:
                return value
        return None

    def _from_noembed(self, url: str) -> Optional[str]:
        payload = self._get_json(self.settings.noembed_url, url) or {}
        pieces = [(payload.get(key) or "").strip() for key in ("title", "author_name", "provider_name")]
        pieces = [piece for piece in pieces if piece]
        return PREVIEW_SEPARATOR.join(pieces) if pieces else None

    def _get_json(self, endpoint: str, url: str) -> Optional[dict]:
        try:
            resp = self.session.get(endpoint, params={"url": url}, timeout=self.settings.preview_timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.debug("[LINK-PREVIEW] %s failed for %s: %s", endpoint, url, exc)
            return None
        return payload if isinstance(payload, dict) else None
