import uuid
from datetime import datetime, timezone
from typing import List, Optional

from monitoring.application.port.milestone_repository_port import MilestoneRepositoryPort
from monitoring.domain.milestone import Milestone, MilestoneNotFoundError
from ordering.application.usecase.persisted_order_usecase import PersistedOrderList, ReorderResult
from ordering.domain.ordered_list import next_sort_order


class MilestoneUseCase:
    def __init__(self, milestone_repository: MilestoneRepositoryPort):
        self.repo = milestone_repository
        # 관리 화면의 순서 변경은 범용 PersistedOrderList 로 처리한다. (저장소가 OrderStorePort 도 구현)
        self.order = PersistedOrderList(store=milestone_repository, name="milestones")

    def list_milestones(self, active_only: bool = False) -> List[Milestone]:
        return self.repo.list_milestones(active_only=active_only)

    def create_milestone(self, title: str, target_count: int) -> Milestone:
        title = title.strip()
        if not title:
            raise ValueError("Milestone title is required")
        if target_count <= 0:
            raise ValueError("Milestone target must be positive")

        existing = self.repo.list_milestones(active_only=False)
        milestone = Milestone(
            id=str(uuid.uuid4()),
            title=title,
            target_count=target_count,
            current_count=0,
            sort_order=next_sort_order(existing),
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        return self.repo.insert(milestone)

    def update_milestone(
        self, milestone_id: str, title: Optional[str] = None, target_count: Optional[int] = None
    ) -> Milestone:
        self._require(milestone_id)
        changes: dict = {}
        if title is not None:
            if not title.strip():
                raise ValueError("Milestone title is required")
            changes["title"] = title.strip()
        if target_count is not None:
            if target_count <= 0:
                raise ValueError("Milestone target must be positive")
            changes["target_count"] = target_count
        return self.repo.update(milestone_id, changes)

    def toggle_active(self, milestone_id: str) -> Milestone:
        milestone = self._require(milestone_id)
        return self.repo.update(milestone_id, {"is_active": not milestone.is_active})

    def delete_milestone(self, milestone_id: str) -> None:
        self._require(milestone_id)
        self.repo.delete(milestone_id)

    async def reorder(self, source_id: str, target_id: str) -> ReorderResult[Milestone]:
        await self.order.load()
        return await self.order.reorder(source_id, target_id)

    def _require(self, milestone_id: str) -> Milestone:
        milestone = self.repo.find_by_id(milestone_id)
        if milestone is None:
            raise MilestoneNotFoundError("Milestone not found")
        return milestone
