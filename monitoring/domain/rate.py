from typing import Sequence

from monitoring.domain.snapshot import Snapshot, elapsed_seconds


def instantaneous_rate(snapshots: Sequence[Snapshot], field: str = "views") -> float:
    """
    가장 최근 두 스냅샷으로 계산한 초당 증가량. 음수는 0 으로 자른다.
    """
    if len(snapshots) < 2:
        return 0.0
    previous, latest = snapshots[-2], snapshots[-1]
    delta = latest.value(field) - previous.value(field)
    return max(0.0, delta / elapsed_seconds(previous, latest))


def last_positive_rate(snapshots: Sequence[Snapshot], field: str = "views") -> float:
    """Rate of the most recent consecutive pair whose delta is strictly positive."""
    for index in range(len(snapshots) - 1, 0, -1):
        current, previous = snapshots[index], snapshots[index - 1]
        delta = current.value(field) - previous.value(field)
        if delta > 0:
            return delta / elapsed_seconds(previous, current)
    return 0.0


def estimate_rate(snapshots: Sequence[Snapshot], field: str = "views") -> float:
    """
    ETA 계산용 유효 속도.
    순간 속도가 0 이하(스냅샷 지터, 늦게 들어온 보정값)이면 직전의 양수 증가 구간으로 대체한다.
    """
    rate = instantaneous_rate(snapshots, field)
    if rate > 0:
        return rate
    return last_positive_rate(snapshots, field)
