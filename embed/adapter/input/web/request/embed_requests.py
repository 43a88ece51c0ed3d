from datetime import datetime

from pydantic import BaseModel, Field


class EmbedReorderRequest(BaseModel):
    source_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)


class RecordClickRequest(BaseModel):
    clicked_at: datetime | None = None
