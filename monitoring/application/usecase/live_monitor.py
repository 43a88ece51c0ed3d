import asyncio
import logging
from datetime import datetime
from typing import Optional

from config.database.errors import StoreError
from config.settings import MonitorSettings
from monitoring.application.port.key_value_store_port import KeyValueStorePort
from monitoring.application.port.milestone_repository_port import MilestoneRepositoryPort
from monitoring.application.port.snapshot_repository_port import SnapshotRepositoryPort
from monitoring.application.usecase.dashboard_usecase import DashboardUseCase
from monitoring.application.usecase.scheduler import MonitorScheduler, SystemClock
from monitoring.domain.chart_curve import ChartModel
from monitoring.domain.dismissal_state import (
    DISMISSAL_KEY,
    DismissalState,
    dump_dismissal_state,
    load_dismissal_state,
    merge_dismissal,
)
from monitoring.domain.milestone import Milestone, fallback_views, sort_milestones
from monitoring.domain.range_window import RangeSelection
from monitoring.domain.rate import instantaneous_rate
from monitoring.domain.snapshot import Snapshot, to_utc

logger = logging.getLogger(__name__)


class LiveMonitor:
    """
    라이브 모니터링 상태를 보관하는 단일 소비자.
    - 폴링마다 스냅샷을 다시 읽고, 1초 틱마다 표시 조회수를 순간 속도로 증가시킨다.
    - 조회 실패는 치명적이지 않다: 오류 메시지만 남기고 마지막 정상 상태를 유지한 채 다음 폴링에서 재시도한다.
    - 요청마다 epoch 를 증가시켜, 늦게 도착한 이전 응답이 더 최신 데이터를 덮어쓰지 못하게 한다.
    """

    def __init__(
        self,
        snapshot_repository: SnapshotRepositoryPort,
        milestone_repository: MilestoneRepositoryPort,
        state_store: KeyValueStorePort,
        settings: MonitorSettings | None = None,
        dashboard: DashboardUseCase | None = None,
        clock=None,
    ):
        self.snapshot_repository = snapshot_repository
        self.milestone_repository = milestone_repository
        self.state_store = state_store
        self.settings = settings or MonitorSettings()
        self.dashboard = dashboard or DashboardUseCase(self.settings)
        self.clock = clock or SystemClock()

        self.snapshots: list[Snapshot] = []
        self.milestones: list[Milestone] = []
        self.dismissal = DismissalState()
        self.error: Optional[str] = None
        self.now: datetime = self.clock.now()
        self.closed = False

        self.display_views = 0
        self._live_base = 0
        self._live_rate = 0.0
        self._live_started_at: datetime = self.now

        self._epoch = 0
        self._applied_epoch = 0
        self.scheduler = MonitorScheduler(
            on_poll=self.refresh,
            on_tick=self.tick,
            poll_interval=self.settings.poll_seconds,
            tick_interval=self.settings.tick_seconds,
            clock=self.clock,
        )

    async def start(self) -> None:
        self.load_dismissal()
        await self.refresh_milestones()
        self.scheduler.start()

    def close(self) -> None:
        self.closed = True
        self.scheduler.stop()

    def load_dismissal(self) -> DismissalState:
        raw = self.state_store.get(DISMISSAL_KEY)
        self.dismissal = load_dismissal_state(raw)
        if raw and not self.dismissal.targets:
            logger.warning("[LIVE-MONITOR] ignoring malformed dismissal state")
        return self.dismissal

    def dismiss(self, target: int) -> DismissalState:
        # 저장소 기록이 성공한 뒤에만 메모리 상태를 바꾼다.
        merged = merge_dismissal(self.dismissal, target)
        try:
            self.state_store.set(DISMISSAL_KEY, dump_dismissal_state(merged))
        except OSError as exc:
            logger.warning("[LIVE-MONITOR] failed to persist dismissal of %s: %s", target, exc)
            raise
        self.dismissal = merged
        return merged

    async def refresh(self, now: Optional[datetime] = None) -> bool:
        """스냅샷을 다시 읽어 상태에 반영한다. 반영했으면 True."""
        self._epoch += 1
        epoch = self._epoch
        try:
            rows = await asyncio.to_thread(self.snapshot_repository.fetch_recent, self.settings.snapshot_limit)
        except StoreError as exc:
            if not self.closed and epoch > self._applied_epoch:
                self.error = str(exc)
                logger.warning("[LIVE-MONITOR] snapshot poll failed: %s", exc)
            return False

        if self.closed or epoch <= self._applied_epoch:
            logger.debug("[LIVE-MONITOR] dropping stale snapshot response (epoch=%s)", epoch)
            return False

        self._applied_epoch = epoch
        self.snapshots = rows
        self.error = None
        self._rebase(now or self.clock.now())
        return True

    async def refresh_milestones(self) -> None:
        try:
            rows = await asyncio.to_thread(self.milestone_repository.list_milestones, True)
        except StoreError as exc:
            self.error = str(exc)
            logger.warning("[LIVE-MONITOR] milestone load failed: %s", exc)
            return
        if not self.closed:
            self.milestones = sort_milestones(rows)
            self._rebase(self.clock.now())

    def tick(self, now: datetime) -> None:
        if self.closed:
            return
        self.now = now
        elapsed = max(0.0, (to_utc(now) - to_utc(self._live_started_at)).total_seconds())
        self.display_views = round(self._live_base + elapsed * self._live_rate)

    def _rebase(self, now: datetime) -> None:
        base = self.snapshots[-1].value("views") if self.snapshots else fallback_views(self.milestones)
        rate = instantaneous_rate(self.snapshots)
        if (base, rate) != (self._live_base, self._live_rate):
            self._live_base = base
            self._live_rate = rate
            self._live_started_at = now
        self.now = now
        self.tick(now)

    def live_view(self) -> dict:
        return self.dashboard.live(
            self.snapshots, self.milestones, self.now, self.dismissal, self.display_views, self.error
        )

    def chart_view(self) -> Optional[ChartModel]:
        return self.dashboard.chart(self.snapshots, self.now)

    def table_view(self, selection: RangeSelection):
        return self.dashboard.table(self.snapshots, selection, self.now)

    def milestone_view(self) -> list[dict]:
        return self.dashboard.milestone_progress(self.milestones, self.snapshots, self.display_views)
