from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from config.database.errors import StoreError
from config.database.session import SessionLocal
from embed.application.port.embed_repository_port import EmbedRepositoryPort
from embed.domain.embed import Embed
from embed.infrastructure.orm.models import EmbedORM
from monitoring.domain.snapshot import to_utc


class EmbedRepositoryImpl(EmbedRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def list_embeds(self, active_only: bool = False) -> list[Embed]:
        try:
            with self.session_factory() as db:
                query = db.query(EmbedORM)
                if active_only:
                    query = query.filter(EmbedORM.is_active.is_(True))
                rows = query.order_by(EmbedORM.sort_order.asc(), EmbedORM.created_at.asc()).all()
                return [self._to_domain(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Embed fetch failed: {exc}") from exc

    def list_ordered(self) -> list[Embed]:
        return self.list_embeds(active_only=False)

    def find_by_id(self, embed_id: str) -> Optional[Embed]:
        try:
            with self.session_factory() as db:
                orm = db.get(EmbedORM, embed_id)
                return self._to_domain(orm) if orm else None
        except SQLAlchemyError as exc:
            raise StoreError(f"Embed fetch failed: {exc}") from exc

    def insert(self, embed: Embed) -> Embed:
        try:
            with self.session_factory() as db:
                orm = EmbedORM(
                    id=embed.id,
                    title=embed.title,
                    url=embed.url,
                    thumbnail_url=embed.thumbnail_url,
                    sort_order=embed.sort_order,
                    is_active=embed.is_active,
                    embed_enabled=embed.embed_enabled,
                    created_at=embed.created_at,
                )
                db.add(orm)
                db.commit()
                db.refresh(orm)
                return self._to_domain(orm)
        except SQLAlchemyError as exc:
            raise StoreError(f"Embed insert failed: {exc}") from exc

    def update_sort_order(self, item_id: str, sort_order: int) -> None:
        try:
            with self.session_factory() as db:
                updated = db.query(EmbedORM).filter(EmbedORM.id == item_id).update({"sort_order": sort_order})
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Embed sort_order update failed: {exc}") from exc
        if not updated:
            raise StoreError(f"Embed not found: {item_id}")

    @staticmethod
    def _to_domain(orm: EmbedORM) -> Embed:
        return Embed(
            id=orm.id,
            title=orm.title,
            url=orm.url,
            thumbnail_url=orm.thumbnail_url,
            sort_order=int(orm.sort_order or 0),
            is_active=bool(orm.is_active),
            embed_enabled=bool(orm.embed_enabled),
            created_at=to_utc(orm.created_at) if orm.created_at else None,
        )
