from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liftlog.schemas.common import not_null


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    notes: str | None = None


class TemplateUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    notes: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    notes: str | None
    created_at: datetime
    updated_at: datetime


class TemplateSummary(TemplateOut):
    exercise_count: int = 0


class TemplateExerciseCreate(BaseModel):
    exercise_id: int
    position: int | None = Field(default=None, ge=1)
    notes: str | None = None


class TemplateExerciseUpdate(BaseModel):
    notes: str | None = None


class TemplateExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: int
    exercise_id: int
    position: int
    circuit_block_id: int | None
    circuit_id: int | None
    circuit_rounds: int | None
    notes: str | None


class AddCircuitRequest(BaseModel):
    circuit_id: int
    position: int | None = Field(default=None, ge=1)
    rounds: int | None = Field(default=None, ge=1, le=50)


class UpdateRoundsRequest(BaseModel):
    rounds: int = Field(ge=1, le=50)


class CircuitBlockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    circuit_id: int | None
    name: str
    rounds: int
    rest_between_exercises_seconds: int | None
    rest_between_rounds_seconds: int | None


class PlannedSetCreate(BaseModel):
    set_number: int | None = Field(default=None, ge=1)
    target_reps: int | None = Field(default=None, ge=0)
    target_weight: float | None = Field(default=None, ge=0)
    target_time_seconds: int | None = Field(default=None, ge=0)
    target_distance: float | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)
    is_warmup: bool = False


class PlannedSetUpdate(BaseModel):
    set_number: int | None = Field(default=None, ge=1)
    target_reps: int | None = Field(default=None, ge=0)
    target_weight: float | None = Field(default=None, ge=0)
    target_time_seconds: int | None = Field(default=None, ge=0)
    target_distance: float | None = Field(default=None, ge=0)
    rest_seconds: int | None = Field(default=None, ge=0)
    is_warmup: bool | None = None

    @field_validator("set_number", "is_warmup", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class PlannedSetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_exercise_id: int
    set_number: int
    target_reps: int | None
    target_weight: float | None
    target_time_seconds: int | None
    target_distance: float | None
    rest_seconds: int | None
    is_warmup: bool


class SetReorderRequest(BaseModel):
    set_ids: list[int] = Field(min_length=1)
