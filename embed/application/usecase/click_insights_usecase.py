from datetime import datetime, timedelta, timezone
from typing import Optional

from embed.application.port.click_event_repository_port import ClickEventRepositoryPort
from embed.application.port.embed_repository_port import EmbedRepositoryPort
from embed.domain.click_event import ClickEvent
from embed.domain.click_insights import (
    click_series,
    count_by_embed,
    filter_events,
    max_bucket_clicks,
    rank_by_clicks,
)
from monitoring.domain.range_window import RangeSelection, resolve_range


class ClickInsightsUseCase:
    def __init__(
        self,
        embed_repository: EmbedRepositoryPort,
        click_repository: ClickEventRepositoryPort,
        lookback_days: int = 30,
        tz=timezone.utc,
    ):
        # 클릭 이벤트는 최근 lookback_days 만큼 한 번에 읽고, 범위 필터/집계는 메모리에서 수행한다.
        self.embed_repository = embed_repository
        self.click_repository = click_repository
        self.lookback = timedelta(days=lookback_days)
        self.tz = tz

    def insights(self, selection: RangeSelection, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        embeds = self.embed_repository.list_embeds(active_only=False)
        if not embeds:
            events: list[ClickEvent] = []
        else:
            events = self.click_repository.list_since(now - self.lookback)

        window = resolve_range(selection, now)
        in_range = filter_events(events, window)
        counts = count_by_embed(embeds, in_range)
        series = click_series(in_range, window, tz=self.tz)
        return {
            "since": window.since,
            "until": window.until,
            "total_clicks": len(in_range),
            "total_links": len(embeds),
            "per_embed": counts,
            "series": series,
            "max_bucket_clicks": max_bucket_clicks(series),
            "ranking": rank_by_clicks(embeds, counts),
        }

    def record_click(self, embed_id: str, clicked_at: Optional[datetime] = None) -> ClickEvent:
        if self.embed_repository.find_by_id(embed_id) is None:
            raise ValueError("Embed not found")
        event = ClickEvent(embed_id=embed_id, clicked_at=clicked_at or datetime.now(timezone.utc))
        return self.click_repository.insert(event)
