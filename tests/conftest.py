import os

# config.database.session 이 import 시점에 엔진을 만들기 때문에, 테스트는 Postgres 대신 메모리 SQLite 를 쓴다.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_LIVE_MONITOR", "false")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config.database.session import Base

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def at():
    """Offset helper: at(minutes=5) -> T0 + 5m."""

    def _at(**kwargs) -> datetime:
        return T0 + timedelta(**kwargs)

    return _at


@pytest.fixture
def session_factory():
    import monitoring.infrastructure.orm.models  # noqa: F401
    import embed.infrastructure.orm.models  # noqa: F401

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()
