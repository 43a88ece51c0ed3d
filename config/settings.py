import os
from dataclasses import dataclass
from datetime import timezone as dt_timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass
class MonitorSettings:
    poll_seconds: float = _float_env("MONITOR_POLL_SECONDS", 5.0)
    tick_seconds: float = _float_env("MONITOR_TICK_SECONDS", 1.0)
    snapshot_limit: int = _int_env("MONITOR_SNAPSHOT_LIMIT", 6000)
    chart_window_minutes: int = _int_env("MONITOR_CHART_WINDOW_MINUTES", 120)
    chart_tick_minutes: int = _int_env("MONITOR_CHART_TICK_MINUTES", 5)
    axis_step: int = _int_env("MONITOR_AXIS_STEP", 75000)
    congrats_window_minutes: int = _int_env("MONITOR_CONGRATS_WINDOW_MINUTES", 60)
    table_bucket_minutes: int = _int_env("MONITOR_TABLE_BUCKET_MINUTES", 60)
    table_max_rows: int = _int_env("MONITOR_TABLE_MAX_ROWS", 24)
    timezone: str = os.getenv("MONITOR_TIMEZONE", "UTC")
    state_path: str = os.getenv("MONITOR_STATE_PATH", ".monitor_state.json")
    enabled: bool = os.getenv("ENABLE_LIVE_MONITOR", "true").lower() == "true"

    @property
    def tzinfo(self) -> tzinfo:
        # 잘못된 이름이거나 tz 데이터가 없는 환경이면 UTC 로 표시한다.
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return dt_timezone.utc


@dataclass
class VideoSettings:
    mv_url: str = os.getenv("YOUTUBE_MV_URL", "").strip()
    video_id: str = os.getenv("YOUTUBE_VIDEO_ID", "").strip()
    default_video_id: str = "0t6GNcINKeU"

    @property
    def watch_url(self) -> str:
        if self.mv_url:
            return self.mv_url
        return f"https://www.youtube.com/watch?v={self.video_id or self.default_video_id}"


@dataclass
class EmbedSettings:
    click_lookback_days: int = _int_env("EMBED_CLICK_LOOKBACK_DAYS", 30)
    preview_timeout: float = _float_env("LINK_PREVIEW_TIMEOUT", 5.0)
    microlink_url: str = os.getenv("MICROLINK_URL", "https://api.microlink.io/")
    noembed_url: str = os.getenv("NOEMBED_URL", "https://noembed.com/embed")
