from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from config.database.errors import StoreError
from config.database.session import SessionLocal
from monitoring.application.port.snapshot_repository_port import SnapshotRepositoryPort
from monitoring.domain.snapshot import Snapshot, to_utc
from monitoring.infrastructure.orm.models import MonitoringSnapshotORM


class SnapshotRepositoryImpl(SnapshotRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        # 한국어 주석: 호출마다 세션을 새로 열어 스레드로 넘긴 조회끼리 세션을 공유하지 않게 합니다.
        self.session_factory = session_factory

    def fetch_recent(self, limit: int = 6000) -> list[Snapshot]:
        try:
            with self.session_factory() as db:
                rows = (
                    db.query(MonitoringSnapshotORM)
                    .order_by(MonitoringSnapshotORM.captured_at.desc(), MonitoringSnapshotORM.id.desc())
                    .limit(limit)
                    .all()
                )
                snapshots = [self._to_domain(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Snapshot fetch failed: {exc}") from exc
        # 최신 N개를 가져온 뒤 오름차순으로 뒤집는다.
        snapshots.reverse()
        return snapshots

    def fetch_since(self, since: datetime) -> list[Snapshot]:
        try:
            with self.session_factory() as db:
                rows = (
                    db.query(MonitoringSnapshotORM)
                    .filter(MonitoringSnapshotORM.captured_at >= to_utc(since))
                    .order_by(MonitoringSnapshotORM.captured_at.asc(), MonitoringSnapshotORM.id.asc())
                    .all()
                )
                return [self._to_domain(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Snapshot fetch failed: {exc}") from exc

    @staticmethod
    def _to_domain(orm: MonitoringSnapshotORM) -> Snapshot:
        return Snapshot(
            captured_at=to_utc(orm.captured_at),
            views=orm.views,
            likes=orm.likes,
            comments=orm.comments,
            views_per_hour=orm.views_per_hour,
        )
