from fastapi import HTTPException, Request

from config.settings import MonitorSettings
from monitoring.application.usecase.live_monitor import LiveMonitor
from monitoring.application.usecase.milestone_usecase import MilestoneUseCase
from monitoring.application.usecase.snapshot_export_usecase import SnapshotExportUseCase
from monitoring.infrastructure.repository.milestone_repository_impl import MilestoneRepositoryImpl
from monitoring.infrastructure.repository.snapshot_repository_impl import SnapshotRepositoryImpl

_milestone_usecase: MilestoneUseCase | None = None
_export_usecase: SnapshotExportUseCase | None = None


def get_live_monitor(request: Request) -> LiveMonitor:
    """lifespan 에서 띄운 LiveMonitor 를 꺼낸다. 비활성화되어 있으면 503."""
    monitor = getattr(request.app.state, "live_monitor", None)
    if monitor is None:
        raise HTTPException(status_code=503, detail="Live monitor is not running")
    return monitor


def get_milestone_usecase() -> MilestoneUseCase:
    global _milestone_usecase
    if _milestone_usecase is None:
        _milestone_usecase = MilestoneUseCase(MilestoneRepositoryImpl())
    return _milestone_usecase


def get_export_usecase() -> SnapshotExportUseCase:
    global _export_usecase
    if _export_usecase is None:
        _export_usecase = SnapshotExportUseCase(SnapshotRepositoryImpl(), limit=MonitorSettings().snapshot_limit)
    return _export_usecase
