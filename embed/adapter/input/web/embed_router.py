from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from config.database.errors import StoreError
from embed.adapter.input.web.dependencies import (
    get_click_insights_usecase,
    get_embed_order_usecase,
    get_link_preview_usecase,
)
from embed.adapter.input.web.request.embed_requests import EmbedReorderRequest, RecordClickRequest
from embed.application.usecase.click_insights_usecase import ClickInsightsUseCase
from embed.application.usecase.embed_order_usecase import EmbedOrderUseCase
from embed.application.usecase.link_preview_usecase import LinkPreviewUseCase
from monitoring.domain.range_window import parse_range

embed_router = APIRouter(tags=["embeds"])


@embed_router.get("")
async def list_embeds(usecase: EmbedOrderUseCase = Depends(get_embed_order_usecase)):
    try:
        rows = await usecase.list_embeds()
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder({"items": rows}))


@embed_router.post("/reorder")
async def reorder_embeds(body: EmbedReorderRequest, usecase: EmbedOrderUseCase = Depends(get_embed_order_usecase)):
    """
    드래그 재정렬. 저장 실패 시 저장소 기준 순서를 다시 읽어 error 와 함께 반환한다.
    """
    try:
        result = await usecase.reorder(body.source_id, body.target_id)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder(result))


@embed_router.post("/{embed_id}/clicks")
def record_click(
    embed_id: str,
    body: RecordClickRequest | None = None,
    usecase: ClickInsightsUseCase = Depends(get_click_insights_usecase),
):
    try:
        event = usecase.record_click(embed_id, clicked_at=body.clicked_at if body else None)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder(event))


@embed_router.get("/insights")
def get_insights(
    range_key: str = Query(default="7d", alias="range", description="24h/7d/30d/custom"),
    since: datetime | None = Query(default=None),
    until: datetime | None = Query(default=None),
    usecase: ClickInsightsUseCase = Depends(get_click_insights_usecase),
):
    """
    범위 내 링크별 클릭 수, 시간/일 단위 추이, 클릭 순위.
    """
    try:
        selection = parse_range(range_key, since=since, until=until)
        result = usecase.insights(selection)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return JSONResponse(jsonable_encoder({"range": range_key, **result}))


@embed_router.get("/previews")
async def get_previews(
    order: EmbedOrderUseCase = Depends(get_embed_order_usecase),
    previews: LinkPreviewUseCase = Depends(get_link_preview_usecase),
):
    try:
        rows = await order.list_embeds()
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    result = await previews.load(rows)
    if result is None:
        # 더 최신 요청이 진행 중이면 그 결과가 반영될 때까지 마지막 값을 돌려준다.
        result = previews.previews
    return JSONResponse(jsonable_encoder({"items": result}))
