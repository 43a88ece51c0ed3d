from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from monitoring.domain.dismissal_state import DismissalState
from monitoring.domain.milestone import Milestone
from monitoring.domain.snapshot import Snapshot, to_utc

CONGRATS_WINDOW = timedelta(hours=1)


@dataclass(frozen=True)
class Crossing:
    milestone: Milestone
    reached_at: datetime


def find_recent_crossing(
    milestones: Sequence[Milestone],
    snapshots: Sequence[Snapshot],
    now: datetime,
    window: timedelta = CONGRATS_WINDOW,
) -> Optional[Crossing]:
    """
    최근 window(기본 1시간) 안에서 연속 스냅샷 사이에 목표를 넘은 milestone 중 가장 큰 것을 찾는다.
    폴링이 늦어 한 번에 여러 목표를 넘었더라도 가장 큰 목표 하나만 알린다.
    """
    if not milestones or len(snapshots) < 2:
        return None

    cutoff = to_utc(now).timestamp() - window.total_seconds()
    found: Optional[Crossing] = None
    for previous, current in zip(snapshots, snapshots[1:]):
        if current.timestamp < cutoff:
            continue
        prev_views = previous.value("views")
        curr_views = current.value("views")
        for milestone in milestones:
            if not milestone.is_active:
                continue
            target = milestone.target_count
            if prev_views < target <= curr_views:
                if found is None or target > found.milestone.target_count:
                    found = Crossing(milestone=milestone, reached_at=current.captured_at)
    return found


def should_notify(crossing: Optional[Crossing], state: DismissalState) -> bool:
    return crossing is not None and not state.is_dismissed(crossing.milestone.target_count)


def achieved_at(target: int, snapshots: Sequence[Snapshot]) -> Optional[datetime]:
    """First snapshot whose views reached the target."""
    for snapshot in snapshots:
        if snapshot.value("views") >= target:
            return snapshot.captured_at
    return None
