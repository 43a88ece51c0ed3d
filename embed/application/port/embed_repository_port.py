from abc import abstractmethod
from typing import Optional

from embed.domain.embed import Embed
from ordering.application.port.order_store_port import OrderStorePort


class EmbedRepositoryPort(OrderStorePort[Embed]):
    @abstractmethod
    def list_embeds(self, active_only: bool = False) -> list[Embed]:
        """Ordered by sort_order, then created_at."""
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, embed_id: str) -> Optional[Embed]:
        raise NotImplementedError
