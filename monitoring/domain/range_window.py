from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from monitoring.domain.snapshot import to_utc

RANGE_DURATIONS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "6h": timedelta(hours=6),
    "12h": timedelta(hours=12),
    "24h": timedelta(hours=24),
    "1d": timedelta(days=1),
    "3d": timedelta(days=3),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}

# custom 범위의 from/to 가 잘못되었을 때 쓰는 기본 구간
CUSTOM_FALLBACK = timedelta(days=7)


@dataclass(frozen=True)
class RangeWindow:
    since: datetime
    until: datetime

    @property
    def duration(self) -> timedelta:
        return self.until - self.since

    def contains(self, moment: datetime) -> bool:
        return self.since <= to_utc(moment) <= self.until


@dataclass(frozen=True)
class RelativeRange:
    duration: timedelta
    kind: str = "relative"


@dataclass(frozen=True)
class CustomRange:
    since: Optional[datetime]
    until: Optional[datetime]
    kind: str = "custom"


RangeSelection = Union[RelativeRange, CustomRange]


def parse_range(
    key: str, since: Optional[datetime] = None, until: Optional[datetime] = None
) -> RangeSelection:
    if key == "custom":
        return CustomRange(since=since, until=until)
    duration = RANGE_DURATIONS.get(key)
    if duration is None:
        raise ValueError(f"Unsupported range: {key}")
    return RelativeRange(duration=duration)


def resolve_range(selection: RangeSelection, now: datetime) -> RangeWindow:
    """
    범위 선택값(상대 기간 또는 custom from/to)을 구체적인 RangeWindow 로 변환한다.
    - custom 에서 빠진 값은 now / now-7d 로 대체하고, 순서가 뒤집혀 있으면 교환한다.
    """
    now = to_utc(now)
    if isinstance(selection, RelativeRange):
        return RangeWindow(since=now - selection.duration, until=now)

    since = to_utc(selection.since) if selection.since else now - CUSTOM_FALLBACK
    until = to_utc(selection.until) if selection.until else now
    if since <= until:
        return RangeWindow(since=since, until=until)
    return RangeWindow(since=until, until=since)
