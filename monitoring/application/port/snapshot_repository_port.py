from abc import ABC, abstractmethod
from datetime import datetime

from monitoring.domain.snapshot import Snapshot


class SnapshotRepositoryPort(ABC):
    # 스냅샷 적재는 외부 수집기의 책임이므로 조회 전용 메서드만 둔다.
    @abstractmethod
    def fetch_recent(self, limit: int = 6000) -> list[Snapshot]:
        """Most recent `limit` snapshots, returned ascending by captured_at."""
        raise NotImplementedError

    @abstractmethod
    def fetch_since(self, since: datetime) -> list[Snapshot]:
        """Every snapshot captured at or after `since`, ascending."""
        raise NotImplementedError
