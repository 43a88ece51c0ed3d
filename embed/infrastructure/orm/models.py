from datetime import datetime

from sqlalchemy import Column, String, Text, BigInteger, Integer, Boolean, DateTime, ForeignKey

from config.database.session import Base


class EmbedORM(Base):
    __tablename__ = "embeds"

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    thumbnail_url = Column(Text)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    embed_enabled = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)


class EmbedClickEventORM(Base):
    __tablename__ = "embed_click_events"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    embed_id = Column(String(64), ForeignKey("embeds.id", ondelete="CASCADE"), nullable=False, index=True)
    clicked_at = Column(DateTime(timezone=True), nullable=False, index=True)
