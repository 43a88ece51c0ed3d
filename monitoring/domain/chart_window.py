import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Sequence

from monitoring.domain.snapshot import Snapshot, to_utc

CHART_WINDOW = timedelta(hours=2)
CHART_TICK = timedelta(minutes=5)
AXIS_STEP = 75000
AXIS_INTERVALS = 4


@dataclass(frozen=True)
class TimedValue:
    t: float
    v: int


@dataclass(frozen=True)
class AxisBounds:
    minimum: int
    maximum: int

    @property
    def span(self) -> int:
        return max(1, self.maximum - self.minimum)


@dataclass(frozen=True)
class XTick:
    x: float
    t: float
    label: str


@dataclass(frozen=True)
class YTick:
    y: float
    value: int


def sliding_window(
    snapshots: Sequence[Snapshot], now: datetime, window: timedelta = CHART_WINDOW
) -> list[TimedValue]:
    """
    now 기준으로 고정 길이(기본 2시간) 창에 들어오는 스냅샷을 그대로 가져온다.
    마지막 샘플이 now 보다 과거이면 같은 값으로 now 시점의 꼬리 점을 붙여 선이 오른쪽 끝까지 닿게 한다.
    """
    now_ts = to_utc(now).timestamp()
    start = now_ts - window.total_seconds()
    points = [TimedValue(t=row.timestamp, v=row.value("views")) for row in snapshots if row.timestamp >= start]
    if points and points[-1].t < now_ts:
        points.append(TimedValue(t=now_ts, v=points[-1].v))
    return points


def axis_bounds(values: Sequence[int], step: int = AXIS_STEP, intervals: int = AXIS_INTERVALS) -> AxisBounds:
    raw_min, raw_max = min(values), max(values)
    axis_min = math.floor(raw_min / step) * step
    axis_max = axis_min + step * intervals

    if raw_max > axis_max:
        axis_max = math.ceil(raw_max / step) * step
        axis_min = axis_max - step * intervals

    if axis_min < 0:
        axis_min = 0
        axis_max = step * intervals
    return AxisBounds(minimum=axis_min, maximum=axis_max)


def y_ticks(bounds: AxisBounds, count: int = AXIS_INTERVALS + 1) -> list[YTick]:
    ticks = []
    for index in range(count):
        ratio = index / (count - 1)
        ticks.append(YTick(y=ratio * 100, value=round(bounds.maximum - bounds.span * ratio)))
    return ticks


def x_ticks(
    now: datetime,
    window: timedelta = CHART_WINDOW,
    interval: timedelta = CHART_TICK,
    tz: tzinfo | None = None,
) -> list[XTick]:
    """Wall-clock aligned ticks from window start to now; endpoints when none fit."""
    now_ts = to_utc(now).timestamp()
    window_s = window.total_seconds()
    step = interval.total_seconds()
    start = now_ts - window_s

    times: list[float] = []
    tick = math.ceil(start / step) * step
    while tick <= now_ts:
        times.append(tick)
        tick += step
    if not times:
        times = [start, now_ts]

    return [
        XTick(x=clamp_percent((moment - start) / window_s * 100), t=moment, label=_time_label(moment, tz))
        for moment in times
    ]


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def _time_label(moment: float, tz: tzinfo | None) -> str:
    local = datetime.fromtimestamp(moment, tz=tz or timezone.utc)
    return local.strftime("%I:%M %p").lstrip("0")
