import asyncio
import logging
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from config.database.errors import StoreError
from ordering.application.port.order_store_port import OrderStorePort
from ordering.domain.ordered_list import reorder, sort_items

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ReorderResult(Generic[T]):
    items: list[T]
    changed: bool = False
    persisted: bool = False
    error: Optional[str] = None
    reloaded: bool = False


@dataclass
class PersistedOrderList(Generic[T]):
    """
    정렬 순서를 가진 컬렉션의 로컬 사본.
    - 재정렬은 로컬에 먼저(낙관적으로) 반영하고, 이후 원격 저장을 시도한다.
    - 저장이 하나라도 실패하면 부분 롤백 대신 원격 저장소에서 전체를 다시 읽어온다.
    """
    store: OrderStorePort
    name: str = "items"
    items: list = field(default_factory=list)

    async def load(self) -> list[T]:
        rows = await asyncio.to_thread(self.store.list_ordered)
        self.items = sort_items(rows)
        return self.items

    async def reorder(self, source_id: str, target_id: str) -> ReorderResult[T]:
        reordered = reorder(self.items, source_id, target_id)
        if reordered is None:
            return ReorderResult(items=self.items)

        previous = self.items
        self.items = reordered
        error = await self.persist(reordered)
        if error is None:
            return ReorderResult(items=self.items, changed=True, persisted=True)

        logger.warning("[ORDER] %s reorder failed, reloading canonical order: %s", self.name, error)
        try:
            await self.load()
        except StoreError as exc:
            # 다시 읽지도 못하면 저장소가 마지막으로 인정한 순서로 되돌린다.
            logger.warning("[ORDER] %s reload failed: %s", self.name, exc)
            self.items = previous
            return ReorderResult(items=self.items, changed=True, error=error)
        return ReorderResult(items=self.items, changed=True, persisted=False, error=error, reloaded=True)

    async def persist(self, ordered: list[T]) -> Optional[str]:
        """항목마다 한 번씩 병렬로 갱신하고, 실패가 있으면 첫 오류 메시지를 반환한다."""
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.store.update_sort_order, item.id, index)
                for index, item in enumerate(ordered)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                return str(result)
        return None
