from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from config.database.errors import StoreError
from config.database.session import SessionLocal
from monitoring.application.port.milestone_repository_port import MilestoneRepositoryPort
from monitoring.domain.milestone import Milestone, MilestoneNotFoundError
from monitoring.domain.snapshot import to_utc
from monitoring.infrastructure.orm.models import MilestoneORM

UPDATABLE_FIELDS = {"title", "target_count", "current_count", "sort_order", "is_active"}


class MilestoneRepositoryImpl(MilestoneRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def list_milestones(self, active_only: bool = True) -> list[Milestone]:
        try:
            with self.session_factory() as db:
                query = db.query(MilestoneORM)
                if active_only:
                    query = query.filter(MilestoneORM.is_active.is_(True))
                rows = query.order_by(MilestoneORM.sort_order.asc(), MilestoneORM.created_at.asc()).all()
                return [self._to_domain(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Milestone fetch failed: {exc}") from exc

    def list_ordered(self) -> list[Milestone]:
        return self.list_milestones(active_only=False)

    def find_by_id(self, milestone_id: str) -> Optional[Milestone]:
        try:
            with self.session_factory() as db:
                orm = db.get(MilestoneORM, milestone_id)
                return self._to_domain(orm) if orm else None
        except SQLAlchemyError as exc:
            raise StoreError(f"Milestone fetch failed: {exc}") from exc

    def insert(self, milestone: Milestone) -> Milestone:
        try:
            with self.session_factory() as db:
                orm = MilestoneORM(
                    id=milestone.id,
                    title=milestone.title,
                    target_count=milestone.target_count,
                    current_count=milestone.current_count,
                    sort_order=milestone.sort_order,
                    is_active=milestone.is_active,
                    created_at=milestone.created_at,
                )
                db.add(orm)
                db.commit()
                db.refresh(orm)
                return self._to_domain(orm)
        except SQLAlchemyError as exc:
            raise StoreError(f"Milestone insert failed: {exc}") from exc

    def update(self, milestone_id: str, changes: dict) -> Milestone:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported milestone fields: {sorted(unknown)}")
        try:
            with self.session_factory() as db:
                orm = db.get(MilestoneORM, milestone_id)
                if orm is None:
                    raise MilestoneNotFoundError("Milestone not found")
                for key, value in changes.items():
                    setattr(orm, key, value)
                db.commit()
                db.refresh(orm)
                return self._to_domain(orm)
        except SQLAlchemyError as exc:
            raise StoreError(f"Milestone update failed: {exc}") from exc

    def update_sort_order(self, item_id: str, sort_order: int) -> None:
        self.update(item_id, {"sort_order": sort_order})

    def delete(self, milestone_id: str) -> None:
        try:
            with self.session_factory() as db:
                db.query(MilestoneORM).filter(MilestoneORM.id == milestone_id).delete()
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Milestone delete failed: {exc}") from exc

    @staticmethod
    def _to_domain(orm: MilestoneORM) -> Milestone:
        return Milestone(
            id=orm.id,
            title=orm.title,
            target_count=int(orm.target_count),
            current_count=int(orm.current_count or 0),
            sort_order=int(orm.sort_order or 0),
            is_active=bool(orm.is_active),
            created_at=to_utc(orm.created_at) if orm.created_at else None,
        )
