import csv
import io
from datetime import datetime, timezone
from typing import Optional

from monitoring.application.port.snapshot_repository_port import SnapshotRepositoryPort
from monitoring.domain.range_window import parse_range, resolve_range
from monitoring.domain.reach_log import REACH_STEP, ReachEntry, build_reach_log

EXPORT_RANGES = ("1h", "24h", "7d")
CSV_HEADER = ["captured_at", "views", "likes", "comments", "views_per_hour"]


def _cell(value) -> str:
    return "" if value is None else str(value)


class SnapshotExportUseCase:
    def __init__(self, snapshot_repository: SnapshotRepositoryPort, limit: int = 6000):
        # 관리자용 조회: CSV 내보내기와 10만 단위 도달 기록
        self.repository = snapshot_repository
        self.limit = limit

    def export_csv(self, range_key: str, now: Optional[datetime] = None) -> tuple[str, int]:
        """
        선택 범위(1h/24h/7d)의 스냅샷을 CSV 문자열로 만든다. (본문, 행 수) 를 반환한다.
        """
        if range_key not in EXPORT_RANGES:
            raise ValueError(f"Unsupported export range: {range_key}")
        now = now or datetime.now(timezone.utc)
        window = resolve_range(parse_range(range_key), now)
        rows = self.repository.fetch_since(window.since)

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow(
                [
                    row.captured_at.isoformat(),
                    _cell(row.views),
                    _cell(row.likes),
                    _cell(row.comments),
                    _cell(row.views_per_hour),
                ]
            )
        return buffer.getvalue().rstrip("\n"), len(rows)

    def reach_log(self, step: int = REACH_STEP) -> list[ReachEntry]:
        return build_reach_log(self.repository.fetch_recent(self.limit), step=step)
