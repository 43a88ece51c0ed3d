from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class Snapshot:
    """
    단일 영상의 조회/좋아요/댓글 수를 한 시점에 관측한 스냅샷입니다.
    외부 수집기가 적재하며 엔진은 절대 수정하지 않습니다.
    """
    captured_at: datetime
    views: Optional[int] = None
    likes: Optional[int] = None
    comments: Optional[int] = None
    views_per_hour: Optional[float] = None

    @property
    def timestamp(self) -> float:
        return to_utc(self.captured_at).timestamp()

    def value(self, field: str = "views") -> int:
        # None 은 화면/산술에서 0 으로 취급한다.
        return getattr(self, field) or 0


def to_utc(value: datetime) -> datetime:
    # 시간대가 섞여 있을 때 naive/aware 비교 오류를 막기 위해 UTC 기준으로 통일한다.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_seconds(previous: Snapshot, current: Snapshot) -> float:
    """Seconds between two snapshots, never below 1 so rates stay finite."""
    return max(1.0, current.timestamp - previous.timestamp)
