from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BodyWeightCreate(BaseModel):
    weight_lbs: float = Field(gt=0, le=2000)
    logged_at: datetime | None = None
    notes: str | None = None


class BodyWeightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    weight_lbs: float
    logged_at: datetime
    notes: str | None
