from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

AnalyticsRange = Literal["1mo", "3mo", "6mo", "1yr", "all"]


class WeeklyVolume(BaseModel):
    week_start: date
    volume: float


class OverviewOut(BaseModel):
    workouts_this_week: int
    workouts_this_month: int
    weekly_streak: int
    avg_sessions_per_week: float
    weekly_volume: list[WeeklyVolume]


class PersonalRecordOut(BaseModel):
    exercise_id: int
    exercise_name: str
    metric: Literal["weight", "time"]
    value: float
    date: datetime
    is_new: bool


class SessionVolume(BaseModel):
    session_id: int
    date: datetime
    volume: float


class CategoryVolume(BaseModel):
    category: str
    volume: float


class SessionDuration(BaseModel):
    session_id: int
    date: datetime
    duration_min: float


class ExerciseProgressPoint(BaseModel):
    session_id: int
    date: datetime
    max_weight: float | None
    total_effort: float
    best_time: int | None
    total_sets: int


class SupplementAdherenceOut(BaseModel):
    supplement_id: int
    name: str
    adherence_pct: int
    logged_days: int
    denominator: int
    streak_days: int


class WeightPoint(BaseModel):
    id: int
    logged_at: datetime
    weight_lbs: float
    moving_avg: float | None


class WeightTrendOut(BaseModel):
    points: list[WeightPoint]
    current: float | None
    change: float | None
    min: float | None
    max: float | None
