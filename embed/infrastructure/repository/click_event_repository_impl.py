from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from config.database.errors import StoreError
from config.database.session import SessionLocal
from embed.application.port.click_event_repository_port import ClickEventRepositoryPort
from embed.domain.click_event import ClickEvent
from embed.infrastructure.orm.models import EmbedClickEventORM
from monitoring.domain.snapshot import to_utc


class ClickEventRepositoryImpl(ClickEventRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def list_since(self, since: datetime) -> list[ClickEvent]:
        try:
            with self.session_factory() as db:
                rows = (
                    db.query(EmbedClickEventORM)
                    .filter(EmbedClickEventORM.clicked_at >= to_utc(since))
                    .order_by(EmbedClickEventORM.clicked_at.asc())
                    .all()
                )
                return [ClickEvent(embed_id=row.embed_id, clicked_at=to_utc(row.clicked_at)) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Click event fetch failed: {exc}") from exc

    def insert(self, event: ClickEvent) -> ClickEvent:
        try:
            with self.session_factory() as db:
                db.add(EmbedClickEventORM(embed_id=event.embed_id, clicked_at=to_utc(event.clicked_at)))
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Click event insert failed: {exc}") from exc
        return event
