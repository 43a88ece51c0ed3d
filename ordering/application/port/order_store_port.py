from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class OrderStorePort(ABC, Generic[T]):
    """Remote side of an ordered collection: canonical reads plus per-item position writes."""

    @abstractmethod
    def list_ordered(self) -> list[T]:
        raise NotImplementedError

    @abstractmethod
    def update_sort_order(self, item_id: str, sort_order: int) -> None:
        raise NotImplementedError
