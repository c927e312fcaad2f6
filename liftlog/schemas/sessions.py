from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liftlog.schemas.common import not_null


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: int | None
    schedule_id: int | None
    started_at: datetime
    ended_at: datetime | None
    notes: str | None


class SessionSummary(SessionOut):
    template_name: str | None = None
    exercise_count: int = 0
    set_count: int = 0
    volume: float = 0.0
    duration_seconds: int = 0


class EndSessionRequest(BaseModel):
    notes: str | None = None


class SessionUpdate(BaseModel):
    notes: str | None = None


class SessionExerciseCreate(BaseModel):
    exercise_id: int
    position: int | None = Field(default=None, ge=1)
    notes: str | None = None


class SessionExerciseUpdate(BaseModel):
    notes: str | None = None


class SessionCircuitCreate(BaseModel):
    circuit_id: int
    position: int | None = Field(default=None, ge=1)
    rounds: int | None = Field(default=None, ge=1, le=50)


class SessionExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    exercise_id: int | None
    exercise_name: str
    position: int
    circuit_block_id: int | None
    circuit_id: int | None
    circuit_rounds: int | None
    source_template_exercise_id: int | None
    notes: str | None


class PerformedSetCreate(BaseModel):
    actual_reps: int | None = Field(default=None, ge=0)
    actual_weight: float | None = Field(default=None, ge=0)
    actual_time_seconds: int | None = Field(default=None, ge=0)
    actual_distance: float | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)
    is_warmup: bool = False


class PerformedSetUpdate(BaseModel):
    actual_reps: int | None = Field(default=None, ge=0)
    actual_weight: float | None = Field(default=None, ge=0)
    actual_time_seconds: int | None = Field(default=None, ge=0)
    actual_distance: float | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)
    is_warmup: bool | None = None

    @field_validator("is_warmup", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class PerformedSetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_exercise_id: int
    set_number: int
    actual_reps: int | None
    actual_weight: float | None
    actual_time_seconds: int | None
    actual_distance: float | None
    rest_seconds: int | None
    is_warmup: bool
    created_at: datetime


class PrefillOut(BaseModel):
    source: Literal["planned", "last_session", "previous_set"]
    set_number: int
    reps: int | None
    weight: float | None
    time_seconds: int | None
    distance: float | None
    rest_seconds: int | None
    is_warmup: bool
