from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

ScheduleStatus = Literal["planned", "completed", "skipped"]


class ScheduleCreate(BaseModel):
    template_id: int
    scheduled_date: date
    status: ScheduleStatus = "planned"


class ScheduleUpdate(BaseModel):
    scheduled_date: date | None = None
    status: ScheduleStatus | None = None


class ScheduleTemplateRef(BaseModel):
    id: int
    name: str


class ScheduleItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: int
    scheduled_date: date
    status: str
    created_at: datetime
    template: ScheduleTemplateRef | None = None
