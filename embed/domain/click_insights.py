from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from embed.domain.click_event import ClickEvent
from embed.domain.embed import Embed
from monitoring.domain.range_window import RangeWindow

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
# 이 길이 이하의 범위는 시간 단위, 초과하면 일 단위로 묶는다.
HOURLY_LIMIT = timedelta(hours=48)


@dataclass(frozen=True)
class SeriesBucket:
    start: datetime
    clicks: int
    label: str


@dataclass(frozen=True)
class RankedEmbed:
    embed: Embed
    clicks: int
    rank: int


def filter_events(events: Iterable[ClickEvent], window: RangeWindow) -> list[ClickEvent]:
    return [event for event in events if window.contains(event.clicked_at)]


def count_by_embed(embeds: Sequence[Embed], events: Iterable[ClickEvent]) -> dict[str, int]:
    """목록의 모든 embed 를 0 으로 시작해 클릭 수를 센다. 목록에 없는 id 의 이벤트도 그대로 집계한다."""
    counts = {embed.id: 0 for embed in embeds}
    for event in events:
        counts[event.embed_id] = counts.get(event.embed_id, 0) + 1
    return counts


def click_series(events: Iterable[ClickEvent], window: RangeWindow, tz=timezone.utc) -> list[SeriesBucket]:
    """
    범위 전체를 0 으로 채운 버킷 시계열. 48시간 이하 범위는 1시간, 그보다 길면 1일 버킷.
    """
    bucket = HOUR if window.duration <= HOURLY_LIMIT else DAY
    width = bucket.total_seconds()
    start = int(window.since.timestamp() // width)
    end = int(window.until.timestamp() // width)

    counts = {key: 0 for key in range(start, end + 1)}
    for event in events:
        key = int(event.clicked_at.timestamp() // width)
        if key in counts:
            counts[key] += 1

    series = []
    for key, clicks in counts.items():
        moment = datetime.fromtimestamp(key * width, tz=timezone.utc)
        local = moment.astimezone(tz)
        label = local.strftime("%I:%M %p").lstrip("0") if bucket == HOUR else local.strftime("%b %d").replace(" 0", " ")
        series.append(SeriesBucket(start=moment, clicks=clicks, label=label))
    return series


def max_bucket_clicks(series: Sequence[SeriesBucket]) -> int:
    return max([1, *(bucket.clicks for bucket in series)])


def rank_by_clicks(embeds: Sequence[Embed], counts: dict[str, int]) -> list[RankedEmbed]:
    """클릭 수 내림차순, 동률이면 현재 표시 순서(sort_order)를 유지한다."""
    ordered = sorted(embeds, key=lambda embed: (-counts.get(embed.id, 0), embed.sort_order))
    return [RankedEmbed(embed=embed, clicks=counts.get(embed.id, 0), rank=index + 1) for index, embed in enumerate(ordered)]
