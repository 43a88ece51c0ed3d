from pydantic import BaseModel, Field


class CreateMilestoneRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    target_count: int = Field(gt=0)


class UpdateMilestoneRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    target_count: int | None = Field(default=None, gt=0)


class ReorderRequest(BaseModel):
    source_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
