from datetime import datetime

from sqlalchemy import Column, String, Text, BigInteger, Integer, Boolean, DateTime, Float

from config.database.session import Base


class MonitoringSnapshotORM(Base):
    __tablename__ = "monitoring_snapshots"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    captured_at = Column(DateTime(timezone=True), nullable=False, index=True)
    views = Column(BigInteger)
    likes = Column(BigInteger)
    comments = Column(BigInteger)
    views_per_hour = Column(Float)


class MilestoneORM(Base):
    __tablename__ = "milestones"

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    target_count = Column(BigInteger, nullable=False)
    current_count = Column(BigInteger, default=0)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
