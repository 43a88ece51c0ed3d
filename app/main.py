import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.database.session import init_db_schema
from config.logging_config import setup_logging
from config.settings import MonitorSettings
from embed.adapter.input.web.dependencies import close_link_preview_usecase
from embed.adapter.input.web.embed_router import embed_router
from monitoring.adapter.input.web.milestone_router import milestone_router
from monitoring.adapter.input.web.monitoring_router import monitoring_router
from monitoring.application.usecase.live_monitor import LiveMonitor
from monitoring.infrastructure.repository.milestone_repository_impl import MilestoneRepositoryImpl
from monitoring.infrastructure.repository.snapshot_repository_impl import SnapshotRepositoryImpl
from monitoring.infrastructure.storage.json_file_store import JsonFileStore

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan 훅에서 스키마 생성과 라이브 모니터 기동/정리를 담당합니다.
    """
    # DB 스키마 미존재 시 자동 생성하여 UndefinedTable 오류를 예방합니다.
    init_db_schema()
    settings = MonitorSettings()
    app.state.live_monitor = None
    if settings.enabled:
        monitor = LiveMonitor(
            snapshot_repository=SnapshotRepositoryImpl(),
            milestone_repository=MilestoneRepositoryImpl(),
            state_store=JsonFileStore(settings.state_path),
            settings=settings,
        )
        await monitor.start()
        app.state.live_monitor = monitor
        logger.info("[APP] live monitor started (poll=%ss)", settings.poll_seconds)
    try:
        yield
    finally:
        monitor = getattr(app.state, "live_monitor", None)
        if monitor is not None:
            monitor.close()
        close_link_preview_usecase()


app = FastAPI(title="View Milestone Monitor", version="0.1.0", lifespan=lifespan)

origins_env = os.getenv("CORS_ORIGINS")
origins = [origin for origin in origins_env.split(",") if origin] if origins_env else ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(monitoring_router, prefix="/monitoring")
app.include_router(milestone_router, prefix="/milestones")
app.include_router(embed_router, prefix="/embeds")


@app.get("/health")
def health_check() -> dict[str, str]:
    """
    헬스체크 엔드포인트입니다.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)
