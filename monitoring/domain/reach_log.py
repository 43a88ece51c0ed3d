from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from monitoring.domain.eta import describe_remaining
from monitoring.domain.rate import estimate_rate
from monitoring.domain.snapshot import Snapshot

REACH_STEP = 100_000


@dataclass(frozen=True)
class ReachEntry:
    target: int
    reached_at: datetime
    reached_views: int
    eta_text: str


def build_reach_log(snapshots: Sequence[Snapshot], step: int = REACH_STEP) -> list[ReachEntry]:
    """
    step(기본 10만) 배수마다 처음 도달한 스냅샷과, 도달 직전까지의 이력으로 예상했던 ETA 를 기록한다.
    목표가 큰 순서로 정렬해 반환한다.
    """
    if step <= 0:
        raise ValueError("step must be positive")
    if not snapshots:
        return []

    max_views = max(row.value("views") for row in snapshots)
    entries: list[ReachEntry] = []
    for target in range(step, max_views + 1, step):
        cross_index = _first_crossing(snapshots, target)
        if cross_index is None:
            continue
        reached = snapshots[cross_index]
        previous = snapshots[cross_index - 1] if cross_index > 0 else None
        rate = estimate_rate(snapshots[:cross_index])
        baseline = previous.value("views") if previous else reached.value("views")
        remaining = max(0, target - baseline)
        entries.append(
            ReachEntry(
                target=target,
                reached_at=reached.captured_at,
                reached_views=reached.value("views"),
                eta_text=describe_remaining(remaining, rate),
            )
        )
    return sorted(entries, key=lambda entry: entry.target, reverse=True)


def _first_crossing(snapshots: Sequence[Snapshot], target: int) -> int | None:
    for index, row in enumerate(snapshots):
        prev_views = snapshots[index - 1].value("views") if index > 0 else 0
        if prev_views < target <= row.value("views"):
            return index
    return None
