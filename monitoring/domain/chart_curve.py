from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Sequence

from monitoring.domain.chart_window import (
    AXIS_STEP,
    CHART_TICK,
    CHART_WINDOW,
    AxisBounds,
    TimedValue,
    XTick,
    YTick,
    axis_bounds,
    clamp_percent,
    x_ticks,
    y_ticks,
)
from monitoring.domain.snapshot import to_utc


@dataclass(frozen=True)
class ChartPoint:
    x: float
    y: float
    t: float
    v: int
    index: int


@dataclass
class ChartModel:
    points: list[ChartPoint]
    line_path: str
    area_path: str
    x_ticks: list[XTick] = field(default_factory=list)
    y_ticks: list[YTick] = field(default_factory=list)
    trend: str = "up"
    axis: Optional[AxisBounds] = None


def _num(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def curve_path(points: Sequence[ChartPoint]) -> str:
    """
    Catmull-Rom 방식의 3차 베지어 경로를 만든다.
    제어점은 이웃 점으로 계산하며, 이웃이 없는 양 끝에서는 자기 자신을 재사용한다.
    곡선은 모든 데이터 점을 정확히 통과한다.
    """
    if not points:
        return ""
    first = points[0]
    path = f"M {_num(first.x)} {_num(first.y)}"
    for i in range(len(points) - 1):
        p0 = points[i - 1] if i > 0 else points[0]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 < len(points) else p2

        cp1x = p1.x + (p2.x - p0.x) / 6
        cp1y = p1.y + (p2.y - p0.y) / 6
        cp2x = p2.x - (p3.x - p1.x) / 6
        cp2y = p2.y - (p3.y - p1.y) / 6

        path += (
            f" C {_num(cp1x)} {_num(cp1y)}, {_num(cp2x)} {_num(cp2y)}, {_num(p2.x)} {_num(p2.y)}"
        )
    return path


def area_path(line_path: str, points: Sequence[ChartPoint], baseline: float = 100) -> str:
    if not points:
        return ""
    return f"{line_path} L {_num(points[-1].x)} {_num(baseline)} L {_num(points[0].x)} {_num(baseline)} Z"


def project_points(
    values: Sequence[TimedValue], window_start: float, window_seconds: float, bounds: AxisBounds
) -> list[ChartPoint]:
    points = []
    for index, point in enumerate(values):
        x = clamp_percent((point.t - window_start) / window_seconds * 100)
        y = 100 - (point.v - bounds.minimum) / bounds.span * 100
        points.append(ChartPoint(x=x, y=y, t=point.t, v=point.v, index=index))
    return points


def build_chart(
    values: Sequence[TimedValue],
    now: datetime,
    window: timedelta = CHART_WINDOW,
    tick: timedelta = CHART_TICK,
    step: int = AXIS_STEP,
    tz: tzinfo | None = None,
) -> ChartModel:
    if not values:
        raise ValueError("cannot build a chart without points")

    window_seconds = window.total_seconds()
    window_start = to_utc(now).timestamp() - window_seconds
    bounds = axis_bounds([point.v for point in values], step=step)
    points = project_points(values, window_start, window_seconds, bounds)
    line = curve_path(points)

    return ChartModel(
        points=points,
        line_path=line,
        area_path=area_path(line, points),
        x_ticks=x_ticks(now, window=window, interval=tick, tz=tz),
        y_ticks=y_ticks(bounds),
        trend="up" if values[-1].v >= values[0].v else "down",
        axis=bounds,
    )
