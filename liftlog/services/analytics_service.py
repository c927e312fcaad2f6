from collections import defaultdict
from dataclasses import asdict
from datetime import datetime, time, timedelta

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import utcnow
from liftlog.models.body_weight_log import BodyWeightLog
from liftlog.models.exercise import Exercise
from liftlog.models.performed_set import PerformedSet
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.supplement import Supplement
from liftlog.models.supplement_log import SupplementLog
from liftlog.models.workout_session import WorkoutSession
from liftlog.services.exercise_service import ExerciseService
from liftlog.workout_calculation import (
    PerformedEntry,
    detect_personal_records,
    moving_average,
    range_start,
    set_volume,
    supplement_adherence,
    week_start,
    weekly_streak,
)

logger = structlog.get_logger(__name__)

OVERVIEW_WEEKS = 8


class AnalyticsService:
    """Read-only aggregates over a user's finished sessions and logs.

    Everything is recomputed from raw rows on each call.
    """

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    def _since(self, range_key: str) -> datetime | None:
        start = range_start(range_key, utcnow().date())
        return datetime.combine(start, time.min) if start else None

    async def _ended_sessions(self, since: datetime | None = None) -> list[WorkoutSession]:
        q = select(WorkoutSession).where(
            WorkoutSession.user_id == self.user_id,
            WorkoutSession.ended_at.is_not(None),
        )
        if since is not None:
            q = q.where(WorkoutSession.started_at >= since)
        res = await self.db.execute(q.order_by(WorkoutSession.started_at.asc()))
        return list(res.scalars().all())

    async def _session_volumes(self, session_ids: list[int]) -> dict[int, float]:
        if not session_ids:
            return {}
        res = await self.db.execute(
            select(
                SessionExercise.session_id,
                func.sum(func.coalesce(PerformedSet.actual_reps, 0) * func.coalesce(PerformedSet.actual_weight, 0)),
            )
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .where(SessionExercise.session_id.in_(session_ids))
            .group_by(SessionExercise.session_id)
        )
        return {sid: float(v or 0) for sid, v in res.all()}

    async def overview(self) -> dict:
        sessions = await self._ended_sessions()
        today = utcnow().date()
        this_week = week_start(today)
        this_month = today.replace(day=1)
        days = [s.started_at.date() for s in sessions]

        avg_per_week = 0.0
        if sessions:
            weeks = max(1, (today - days[0]).days // 7 + 1)
            avg_per_week = round(len(sessions) / weeks, 1)

        volumes = await self._session_volumes([s.id for s in sessions])
        first_week = this_week - timedelta(weeks=OVERVIEW_WEEKS - 1)
        by_week: dict = defaultdict(float)
        for s in sessions:
            ws = week_start(s.started_at.date())
            if ws >= first_week:
                by_week[ws] += volumes.get(s.id, 0.0)

        return {
            "workouts_this_week": sum(1 for d in days if d >= this_week),
            "workouts_this_month": sum(1 for d in days if d >= this_month),
            "weekly_streak": weekly_streak(days, today),
            "avg_sessions_per_week": avg_per_week,
            "weekly_volume": [
                {"week_start": first_week + timedelta(weeks=i), "volume": by_week[first_week + timedelta(weeks=i)]}
                for i in range(OVERVIEW_WEEKS)
            ],
        }

    async def personal_records(self) -> list[dict]:
        res = await self.db.execute(
            select(
                SessionExercise.exercise_id,
                SessionExercise.exercise_name,
                WorkoutSession.started_at,
                PerformedSet.actual_weight,
                PerformedSet.actual_time_seconds,
                PerformedSet.is_warmup,
            )
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(
                WorkoutSession.user_id == self.user_id,
                WorkoutSession.ended_at.is_not(None),
                SessionExercise.exercise_id.is_not(None),
            )
        )
        entries = [
            PerformedEntry(
                exercise_id=exercise_id,
                exercise_name=name,
                performed_at=started_at,
                weight=weight,
                time_seconds=time_seconds,
                is_warmup=is_warmup,
            )
            for exercise_id, name, started_at, weight, time_seconds, is_warmup in res.all()
        ]
        return [asdict(r) for r in detect_personal_records(entries, utcnow())]

    async def volume(self, range_key: str) -> list[dict]:
        sessions = await self._ended_sessions(self._since(range_key))
        volumes = await self._session_volumes([s.id for s in sessions])
        return [{"session_id": s.id, "date": s.started_at, "volume": volumes.get(s.id, 0.0)} for s in sessions]

    async def volume_by_category(self, range_key: str) -> list[dict]:
        q = (
            select(Exercise.category, PerformedSet.actual_reps, PerformedSet.actual_weight)
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .outerjoin(Exercise, SessionExercise.exercise_id == Exercise.id)
            .where(WorkoutSession.user_id == self.user_id, WorkoutSession.ended_at.is_not(None))
        )
        since = self._since(range_key)
        if since is not None:
            q = q.where(WorkoutSession.started_at >= since)

        totals: dict[str, float] = defaultdict(float)
        for category, reps, weight in (await self.db.execute(q)).all():
            totals[category or "Other"] += set_volume(reps, weight)

        return [
            {"category": c, "volume": v}
            for c, v in sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        ]

    async def session_durations(self, range_key: str) -> list[dict]:
        sessions = await self._ended_sessions(self._since(range_key))
        return [
            {
                "session_id": s.id,
                "date": s.started_at,
                "duration_min": round((s.ended_at - s.started_at).total_seconds() / 60, 1),
            }
            for s in sessions
        ]

    async def exercise_progress(self, exercise_id: int, range_key: str) -> list[dict]:
        await ExerciseService(self.db, self.user_id).get_exercise(exercise_id)

        q = (
            select(WorkoutSession, PerformedSet)
            .join(SessionExercise, SessionExercise.session_id == WorkoutSession.id)
            .join(PerformedSet, PerformedSet.session_exercise_id == SessionExercise.id)
            .where(
                WorkoutSession.user_id == self.user_id,
                WorkoutSession.ended_at.is_not(None),
                SessionExercise.exercise_id == exercise_id,
            )
            .order_by(WorkoutSession.started_at.asc(), PerformedSet.set_number.asc())
        )
        since = self._since(range_key)
        if since is not None:
            q = q.where(WorkoutSession.started_at >= since)

        points: dict[int, dict] = {}
        for session, s in (await self.db.execute(q)).all():
            p = points.setdefault(
                session.id,
                {
                    "session_id": session.id,
                    "date": session.started_at,
                    "max_weight": None,
                    "total_effort": 0.0,
                    "best_time": None,
                    "total_sets": 0,
                },
            )
            p["total_sets"] += 1
            p["total_effort"] += set_volume(s.actual_reps, s.actual_weight)
            if s.actual_weight is not None and (p["max_weight"] is None or s.actual_weight > p["max_weight"]):
                p["max_weight"] = s.actual_weight
            if s.actual_time_seconds and (p["best_time"] is None or s.actual_time_seconds < p["best_time"]):
                p["best_time"] = s.actual_time_seconds
        return list(points.values())

    async def supplement_adherence(self) -> list[dict]:
        res = await self.db.execute(
            select(Supplement).where(Supplement.user_id == self.user_id).order_by(func.lower(Supplement.name))
        )
        supplements = list(res.scalars().all())

        res = await self.db.execute(
            select(SupplementLog.supplement_id, SupplementLog.taken_at).where(SupplementLog.user_id == self.user_id)
        )
        days: dict[int, set] = defaultdict(set)
        for supplement_id, taken_at in res.all():
            days[supplement_id].add(taken_at.date())

        now = utcnow()
        out = []
        for sup in supplements:
            a = supplement_adherence(days[sup.id], sup.created_at, now)
            out.append({"supplement_id": sup.id, "name": sup.name, **asdict(a)})
        return out

    async def weight_trend(self, range_key: str) -> dict:
        q = select(BodyWeightLog).where(BodyWeightLog.user_id == self.user_id)
        since = self._since(range_key)
        if since is not None:
            q = q.where(BodyWeightLog.logged_at >= since)
        res = await self.db.execute(q.order_by(BodyWeightLog.logged_at.asc(), BodyWeightLog.id.asc()))
        logs = list(res.scalars().all())

        weights = [w.weight_lbs for w in logs]
        averages = moving_average(weights)
        return {
            "points": [
                {"id": w.id, "logged_at": w.logged_at, "weight_lbs": w.weight_lbs, "moving_avg": avg}
                for w, avg in zip(logs, averages)
            ],
            "current": weights[-1] if weights else None,
            "change": round(weights[-1] - weights[0], 1) if weights else None,
            "min": min(weights) if weights else None,
            "max": max(weights) if weights else None,
        }
