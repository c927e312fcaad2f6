from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liftlog.schemas.common import not_null

WeightUnit = Literal["lbs", "kg"]
DistanceUnit = Literal["mi", "km", "m", "yd"]
TimeUnit = Literal["sec", "min"]


class ExerciseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    category: str | None = Field(default=None, max_length=60)
    track_weight: bool = True
    track_reps: bool = True
    track_time: bool = False
    track_distance: bool = False
    weight_unit: WeightUnit = "lbs"
    distance_unit: DistanceUnit = "mi"
    time_unit: TimeUnit = "sec"
    notes: str | None = None
    url: str | None = Field(default=None, max_length=500)


class ExerciseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    category: str | None = Field(default=None, max_length=60)
    track_weight: bool | None = None
    track_reps: bool | None = None
    track_time: bool | None = None
    track_distance: bool | None = None
    weight_unit: WeightUnit | None = None
    distance_unit: DistanceUnit | None = None
    time_unit: TimeUnit | None = None
    notes: str | None = None
    url: str | None = Field(default=None, max_length=500)

    @field_validator(
        "name",
        "track_weight",
        "track_reps",
        "track_time",
        "track_distance",
        "weight_unit",
        "distance_unit",
        "time_unit",
        mode="before",
    )
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class ExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    name: str
    category: str | None
    track_weight: bool
    track_reps: bool
    track_time: bool
    track_distance: bool
    weight_unit: str
    distance_unit: str
    time_unit: str
    notes: str | None
    url: str | None
    is_system: bool
    created_at: datetime
    updated_at: datetime


class ExerciseHistoryEntry(BaseModel):
    session_id: int
    started_at: datetime
    ended_at: datetime | None
    set_id: int
    set_number: int
    actual_reps: int | None
    actual_weight: float | None
    actual_time_seconds: int | None
    actual_distance: float | None
    is_warmup: bool
