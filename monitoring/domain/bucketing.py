from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional, Sequence

from monitoring.domain.range_window import RangeWindow
from monitoring.domain.snapshot import Snapshot

DEFAULT_BUCKET = timedelta(hours=1)
DEFAULT_MAX_ROWS = 24


@dataclass(frozen=True)
class BucketRow:
    bucket_start: float
    snapshot: Snapshot
    views_delta: Optional[int] = None
    likes_delta: Optional[int] = None
    comments_delta: Optional[int] = None


def filter_window(snapshots: Iterable[Snapshot], window: RangeWindow) -> list[Snapshot]:
    return [row for row in snapshots if window.contains(row.captured_at)]


def bucket_latest(
    snapshots: Iterable[Snapshot], bucket: timedelta = DEFAULT_BUCKET
) -> list[Snapshot]:
    """
    스냅샷을 floor(captured_at / bucket) 단위로 묶고 각 버킷의 가장 늦은 스냅샷만 남긴다.
    captured_at 이 같은 중복 스냅샷은 나중에 들어온 쪽이 이긴다.
    """
    width = bucket.total_seconds()
    if width <= 0:
        raise ValueError("bucket width must be positive")

    grouped: dict[int, Snapshot] = {}
    for row in snapshots:
        key = int(row.timestamp // width)
        current = grouped.get(key)
        if current is None or row.timestamp >= current.timestamp:
            grouped[key] = row
    return [grouped[key] for key in sorted(grouped)]


def bucket_table(
    snapshots: Sequence[Snapshot],
    window: RangeWindow,
    bucket: timedelta = DEFAULT_BUCKET,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> list[BucketRow]:
    """
    표 표시용: 최신 버킷부터 최대 max_rows 개, 바로 이전(더 오래된) 행 대비 증감을 함께 반환한다.
    가장 오래된 행은 비교 대상이 없으므로 증감이 None 이다.
    """
    width = bucket.total_seconds()
    buckets = bucket_latest(filter_window(snapshots, window), bucket)
    recent = list(reversed(buckets))[:max_rows]

    rows: list[BucketRow] = []
    for index, snapshot in enumerate(recent):
        older = recent[index + 1] if index + 1 < len(recent) else None
        rows.append(
            BucketRow(
                bucket_start=(snapshot.timestamp // width) * width,
                snapshot=snapshot,
                views_delta=_delta(snapshot, older, "views"),
                likes_delta=_delta(snapshot, older, "likes"),
                comments_delta=_delta(snapshot, older, "comments"),
            )
        )
    return rows


def _delta(current: Snapshot, older: Optional[Snapshot], field: str) -> Optional[int]:
    if older is None:
        return None
    return current.value(field) - older.value(field)
