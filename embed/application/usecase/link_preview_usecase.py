import asyncio
import logging
from typing import Optional, Sequence

from embed.application.port.link_preview_port import LinkPreviewPort
from embed.domain.embed import Embed

logger = logging.getLogger(__name__)


class LinkPreviewUseCase:
    """
    링크 목록의 설명을 병렬로 가져온다.
    - 새 load() 가 시작되면 이전 load() 결과는 버린다 (None 반환).
    - close() 이후 도착한 결과도 버린다.
    """

    def __init__(self, client: LinkPreviewPort):
        self.client = client
        self.previews: dict[str, str] = {}
        self.closed = False
        self._epoch = 0

    async def load(self, embeds: Sequence[Embed]) -> Optional[dict[str, str]]:
        self._epoch += 1
        epoch = self._epoch
        targets = [embed for embed in embeds if embed.is_active and embed.url]
        texts = await asyncio.gather(*(asyncio.to_thread(self.client.fetch_preview, embed.url) for embed in targets))

        if self.closed or epoch != self._epoch:
            logger.debug("[LINK-PREVIEW] discarding stale preview batch (epoch=%s)", epoch)
            return None
        self.previews = {embed.id: text for embed, text in zip(targets, texts)}
        return self.previews

    def close(self) -> None:
        self.closed = True
