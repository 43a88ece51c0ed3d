from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from monitoring.domain.snapshot import to_utc


class MilestoneNotFoundError(ValueError):
    pass


@dataclass
class Milestone:
    id: str
    title: str
    target_count: int
    current_count: int = 0
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        if self.target_count >= 1_000_000:
            millions = repr(self.target_count / 1_000_000)
            return f"{millions.removesuffix('.0')}M"
        return f"{self.target_count // 1000}K"


def progress_percent(current: int, target: int) -> float:
    return max(0.0, min(100.0, current / max(1, target) * 100))


def fallback_views(milestones: list[Milestone]) -> int:
    """스냅샷이 하나도 없을 때 쓰는 대체 조회수 (milestone current_count 최대값)."""
    return max((m.current_count for m in milestones), default=0)


def next_milestone(milestones: list[Milestone], current_views: int) -> Optional[Milestone]:
    """정렬 순서상 처음으로 현재 값보다 큰 목표를 가진 활성 milestone."""
    for milestone in milestones:
        if milestone.is_active and current_views < milestone.target_count:
            return milestone
    return None


def sort_milestones(milestones: list[Milestone]) -> list[Milestone]:
    return sorted(
        (m for m in milestones if m.is_active),
        key=lambda m: (m.sort_order, to_utc(m.created_at).timestamp() if m.created_at else 0.0),
    )
