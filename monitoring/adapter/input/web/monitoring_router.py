from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from config.database.errors import StoreError
from monitoring.adapter.input.web.dependencies import get_export_usecase, get_live_monitor
from monitoring.application.usecase.live_monitor import LiveMonitor
from monitoring.application.usecase.snapshot_export_usecase import SnapshotExportUseCase
from monitoring.domain.range_window import parse_range

monitoring_router = APIRouter(tags=["monitoring"])


@monitoring_router.get("/live")
async def get_live(monitor: LiveMonitor = Depends(get_live_monitor)):
    """
    라이브 화면 데이터: 표시 조회수, 증감, 다음 마일스톤/ETA, 축하 알림 여부.
    """
    return JSONResponse(jsonable_encoder(monitor.live_view()))


@monitoring_router.get("/chart")
async def get_chart(monitor: LiveMonitor = Depends(get_live_monitor)):
    """
    최근 2시간 슬라이딩 창 차트 모델. 데이터가 부족하면 status 만 반환한다.
    """
    chart = monitor.chart_view()
    if chart is None:
        return JSONResponse({"status": "not enough data"})
    return JSONResponse(jsonable_encoder({"status": "ok", "chart": chart}))


@monitoring_router.get("/table")
async def get_table(
    range_key: str = Query(default="1d", alias="range", description="6h/12h/1d/3d/7d/30d/custom"),
    since: datetime | None = Query(default=None),
    until: datetime | None = Query(default=None),
    monitor: LiveMonitor = Depends(get_live_monitor),
):
    """
    선택 범위를 1시간 버킷으로 묶은 표 (최신 24행).
    """
    try:
        selection = parse_range(range_key, since=since, until=until)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    rows = monitor.table_view(selection)
    return JSONResponse(jsonable_encoder({"range": range_key, "rows": rows}))


@monitoring_router.post("/congrats/{target}/dismiss")
async def dismiss_congrats(target: int, monitor: LiveMonitor = Depends(get_live_monitor)):
    try:
        state = monitor.dismiss(target)
    except OSError as exc:
        raise HTTPException(status_code=503, detail=f"Could not save dismissal: {exc}")
    return {"dismissed": sorted(state.targets)}


@monitoring_router.get("/reach-log")
def get_reach_log(
    step: int = Query(default=100_000, ge=1000),
    usecase: SnapshotExportUseCase = Depends(get_export_usecase),
):
    """
    10만 단위 도달 기록(도달 시각, 도달 직전 예상 ETA).
    """
    try:
        entries = usecase.reach_log(step=step)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder({"items": entries}))


@monitoring_router.get("/export.csv")
def export_csv(
    range_key: str = Query(default="24h", alias="range", description="1h/24h/7d"),
    usecase: SnapshotExportUseCase = Depends(get_export_usecase),
):
    try:
        body, count = usecase.export_csv(range_key)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if count == 0:
        raise HTTPException(status_code=404, detail="No monitoring data found for selected range.")

    filename = f"monitoring-{range_key}-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"', "X-Row-Count": str(count)},
    )
