from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from liftlog.schemas.common import not_null


class CircuitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    rounds: int = Field(default=1, ge=1, le=50)
    category: str | None = Field(default=None, max_length=60)
    rest_between_exercises_seconds: int | None = Field(default=None, ge=0)
    rest_between_rounds_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None


class CircuitUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    rounds: int | None = Field(default=None, ge=1, le=50)
    category: str | None = Field(default=None, max_length=60)
    rest_between_exercises_seconds: int | None = Field(default=None, ge=0)
    rest_between_rounds_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None

    @field_validator("name", "rounds", mode="before")
    @classmethod
    def _required_columns(cls, v, info):
        return not_null(v, info)


class CircuitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    name: str
    rounds: int
    category: str | None
    rest_between_exercises_seconds: int | None
    rest_between_rounds_seconds: int | None
    notes: str | None
    is_system: bool
    created_at: datetime
    updated_at: datetime


class CircuitSummary(CircuitOut):
    exercise_count: int = 0


class CircuitExerciseCreate(BaseModel):
    exercise_id: int
    position: int | None = Field(default=None, ge=1)
    default_reps: int | None = Field(default=None, ge=0)
    default_weight: float | None = Field(default=None, ge=0)
    default_time_seconds: int | None = Field(default=None, ge=0)
    rest_after_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None


class CircuitExerciseUpdate(BaseModel):
    default_reps: int | None = Field(default=None, ge=0)
    default_weight: float | None = Field(default=None, ge=0)
    default_time_seconds: int | None = Field(default=None, ge=0)
    rest_after_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None


class CircuitExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    circuit_id: int
    exercise_id: int
    position: int
    default_reps: int | None
    default_weight: float | None
    default_time_seconds: int | None
    rest_after_seconds: int | None
    notes: str | None


class CircuitMemberOut(CircuitExerciseOut):
    exercise_name: str


class CircuitDetail(CircuitOut):
    exercises: list[CircuitMemberOut]


class ReorderRequest(BaseModel):
    exercise_ids: list[int] = Field(min_length=1)
