from embed.application.port.embed_repository_port import EmbedRepositoryPort
from embed.domain.embed import Embed
from ordering.application.usecase.persisted_order_usecase import PersistedOrderList, ReorderResult


class EmbedOrderUseCase:
    def __init__(self, repository: EmbedRepositoryPort):
        self.repository = repository
        self.order: PersistedOrderList[Embed] = PersistedOrderList(store=repository, name="embeds")

    async def list_embeds(self) -> list[Embed]:
        return await self.order.load()

    async def reorder(self, source_id: str, target_id: str) -> ReorderResult[Embed]:
        """
        관리자 드래그 재정렬: 최신 순서를 읽고, 로컬에 먼저 반영한 뒤 항목별로 병렬 저장한다.
        """
        await self.order.load()
        return await self.order.reorder(source_id, target_id)
