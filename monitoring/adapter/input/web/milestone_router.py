from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from config.database.errors import StoreError
from monitoring.adapter.input.web.dependencies import get_live_monitor, get_milestone_usecase
from monitoring.adapter.input.web.request.milestone_requests import (
    CreateMilestoneRequest,
    ReorderRequest,
    UpdateMilestoneRequest,
)
from monitoring.application.usecase.live_monitor import LiveMonitor
from monitoring.application.usecase.milestone_usecase import MilestoneUseCase
from monitoring.domain.milestone import MilestoneNotFoundError

milestone_router = APIRouter(tags=["milestones"])


async def _refresh_monitor(request: Request) -> None:
    # 라이브 모니터가 떠 있으면 변경된 마일스톤을 바로 다시 읽게 한다.
    monitor = getattr(request.app.state, "live_monitor", None)
    if monitor is not None:
        await monitor.refresh_milestones()


@milestone_router.get("")
async def list_progress(monitor: LiveMonitor = Depends(get_live_monitor)):
    """
    활성 마일스톤별 진행률/남은 조회수/ETA/달성 시각.
    """
    return JSONResponse(jsonable_encoder({"views": monitor.display_views, "items": monitor.milestone_view()}))


@milestone_router.get("/admin")
def list_all(usecase: MilestoneUseCase = Depends(get_milestone_usecase)):
    try:
        rows = usecase.list_milestones(active_only=False)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder({"items": rows}))


@milestone_router.post("")
async def create_milestone(
    request: Request,
    body: CreateMilestoneRequest,
    usecase: MilestoneUseCase = Depends(get_milestone_usecase),
):
    try:
        milestone = usecase.create_milestone(body.title, body.target_count)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    await _refresh_monitor(request)
    return JSONResponse(jsonable_encoder(milestone))


@milestone_router.patch("/{milestone_id}")
async def update_milestone(
    request: Request,
    milestone_id: str,
    body: UpdateMilestoneRequest,
    usecase: MilestoneUseCase = Depends(get_milestone_usecase),
):
    try:
        milestone = usecase.update_milestone(milestone_id, title=body.title, target_count=body.target_count)
    except MilestoneNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    await _refresh_monitor(request)
    return JSONResponse(jsonable_encoder(milestone))


@milestone_router.post("/{milestone_id}/toggle")
async def toggle_milestone(
    request: Request, milestone_id: str, usecase: MilestoneUseCase = Depends(get_milestone_usecase)
):
    try:
        milestone = usecase.toggle_active(milestone_id)
    except MilestoneNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    await _refresh_monitor(request)
    return JSONResponse(jsonable_encoder(milestone))


@milestone_router.delete("/{milestone_id}")
async def delete_milestone(
    request: Request, milestone_id: str, usecase: MilestoneUseCase = Depends(get_milestone_usecase)
):
    try:
        usecase.delete_milestone(milestone_id)
    except MilestoneNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    await _refresh_monitor(request)
    return {"deleted": True}


@milestone_router.post("/reorder")
async def reorder_milestones(
    request: Request, body: ReorderRequest, usecase: MilestoneUseCase = Depends(get_milestone_usecase)
):
    """
    드래그 재정렬. 저장 실패 시 저장소 기준 순서를 다시 읽어 error 와 함께 반환한다.
    """
    try:
        result = await usecase.reorder(body.source_id, body.target_id)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    await _refresh_monitor(request)
    return JSONResponse(jsonable_encoder(result))
