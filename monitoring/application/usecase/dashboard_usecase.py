from datetime import datetime, timedelta
from typing import Optional, Sequence
from config.settings import MonitorSettings, VideoSettings
from monitoring.domain.bucketing import BucketRow, bucket_table
from monitoring.domain.chart_curve import ChartModel, build_chart
from monitoring.domain.chart_window import sliding_window
from monitoring.domain.crossing import achieved_at, find_recent_crossing, should_notify
from monitoring.domain.dismissal_state import DismissalState
from monitoring.domain.eta import describe_remaining
from monitoring.domain.milestone import Milestone, next_milestone, progress_percent
from monitoring.domain.range_window import RangeSelection, resolve_range
from monitoring.domain.rate import estimate_rate
from monitoring.domain.snapshot import Snapshot, to_utc


def format_delta(value: int) -> str:
    if value > 0:
        return f"+{value:,}"
    if value < 0:
        return f"-{abs(value):,}"
    return "0"


def delta_direction(value: int) -> str:
    if value > 0:
        return "up"
    if value < 0:
        return "down"
    return "flat"


class DashboardUseCase:
    def __init__(self, settings: MonitorSettings | None = None, video: VideoSettings | None = None):
        # 라이브 화면/차트/표/마일스톤 목록을 현재 스냅샷 상태로부터 계산한다. 저장소에는 접근하지 않는다.
        self.settings = settings or MonitorSettings()
        self.video = video or VideoSettings()
        self.tz = self.settings.tzinfo

    def live(
        self,
        snapshots: Sequence[Snapshot],
        milestones: Sequence[Milestone],
        now: datetime,
        dismissal: DismissalState,
        display_views: int,
        error: Optional[str] = None,
    ) -> dict:
        latest = snapshots[-1] if snapshots else None
        previous = snapshots[-2] if len(snapshots) > 1 else None

        deltas = {}
        for field in ("views", "likes", "comments"):
            value = (latest.value(field) if latest else 0) - (previous.value(field) if previous else 0)
            deltas[field] = {"value": value, "text": format_delta(value), "direction": delta_direction(value)}

        crossing = find_recent_crossing(
            milestones, snapshots, now, window=timedelta(minutes=self.settings.congrats_window_minutes)
        )
        return {
            "views": display_views,
            "likes": latest.value("likes") if latest else 0,
            "comments": latest.value("comments") if latest else 0,
            "deltas": deltas,
            "last_captured_at": latest.captured_at if latest else None,
            "status": "live" if latest else "waiting for feed",
            "next_milestone": self._next_milestone(milestones, snapshots, display_views),
            "congrats": {
                "show": should_notify(crossing, dismissal),
                "target": crossing.milestone.target_count if crossing else None,
                "title": crossing.milestone.title if crossing else None,
                "reached_at": crossing.reached_at if crossing else None,
            },
            "watch_url": self.video.watch_url,
            "error": error,
        }

    def chart(self, snapshots: Sequence[Snapshot], now: datetime) -> Optional[ChartModel]:
        """창 안의 실제 스냅샷이 2개 미만이면 None ("not enough data")."""
        window = timedelta(minutes=self.settings.chart_window_minutes)
        start = to_utc(now).timestamp() - window.total_seconds()
        if sum(1 for row in snapshots if row.timestamp >= start) < 2:
            return None
        in_window = sliding_window(snapshots, now, window)
        return build_chart(
            in_window,
            now,
            window=window,
            tick=timedelta(minutes=self.settings.chart_tick_minutes),
            step=self.settings.axis_step,
            tz=self.tz,
        )

    def table(self, snapshots: Sequence[Snapshot], selection: RangeSelection, now: datetime) -> list[BucketRow]:
        window = resolve_range(selection, now)
        return bucket_table(
            snapshots,
            window,
            bucket=timedelta(minutes=self.settings.table_bucket_minutes),
            max_rows=self.settings.table_max_rows,
        )

    def milestone_progress(
        self, milestones: Sequence[Milestone], snapshots: Sequence[Snapshot], display_views: int
    ) -> list[dict]:
        """
        마일스톤 목록 화면: 진행률, 남은 조회수, ETA, 달성 시각을 함께 반환한다.
        """
        rate = estimate_rate(snapshots)
        items = []
        for milestone in milestones:
            percent = progress_percent(display_views, milestone.target_count)
            remaining = max(0, milestone.target_count - display_views)
            items.append(
                {
                    "id": milestone.id,
                    "title": milestone.title,
                    "label": milestone.label,
                    "target_count": milestone.target_count,
                    "progress": round(percent, 2),
                    "achieved": percent >= 100,
                    "remaining": remaining,
                    "eta": None if percent >= 100 else describe_remaining(remaining, rate),
                    "achieved_at": achieved_at(milestone.target_count, snapshots) if percent >= 100 else None,
                }
            )
        return items

    def _next_milestone(
        self, milestones: Sequence[Milestone], snapshots: Sequence[Snapshot], current_views: int
    ) -> Optional[dict]:
        milestone = next_milestone(list(milestones), current_views)
        if milestone is None:
            return None
        remaining = milestone.target_count - current_views
        return {
            "id": milestone.id,
            "title": milestone.title,
            "label": milestone.label,
            "target_count": milestone.target_count,
            "progress": round(progress_percent(current_views, milestone.target_count), 2),
            "remaining": remaining,
            "eta": describe_remaining(remaining, estimate_rate(snapshots)),
        }
