from abc import abstractmethod
from typing import Optional

from monitoring.domain.milestone import Milestone
from ordering.application.port.order_store_port import OrderStorePort


class MilestoneRepositoryPort(OrderStorePort[Milestone]):
    @abstractmethod
    def list_milestones(self, active_only: bool = True) -> list[Milestone]:
        """Ordered by sort_order, then created_at."""
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, milestone_id: str) -> Optional[Milestone]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, milestone: Milestone) -> Milestone:
        raise NotImplementedError

    @abstractmethod
    def update(self, milestone_id: str, changes: dict) -> Milestone:
        raise NotImplementedError

    @abstractmethod
    def delete(self, milestone_id: str) -> None:
        raise NotImplementedError
