"""Pure workout maths shared by the services.

Nothing in here touches the database. Callers pass ORM rows (or anything
with the same attributes) and plain dates, which keeps these functions easy
to test on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Literal, Sequence

PrefillSource = Literal["planned", "last_session", "previous_set"]
RecordMetric = Literal["weight", "time"]

RANGE_DAYS = {"1mo": 30, "3mo": 90, "6mo": 180, "1yr": 365}
PR_NEW_WINDOW = timedelta(days=7)
ADHERENCE_MAX_DAYS = 30


@dataclass
class SetValues:
    reps: int | None = None
    weight: float | None = None
    time_seconds: int | None = None
    distance: float | None = None
    rest_seconds: int | None = None
    is_warmup: bool = False

    @classmethod
    def from_planned(cls, s: Any) -> "SetValues":
        return cls(
            reps=s.target_reps,
            weight=s.target_weight,
            time_seconds=s.target_time_seconds,
            distance=s.target_distance,
            rest_seconds=s.rest_seconds,
            is_warmup=bool(s.is_warmup),
        )

    @classmethod
    def from_performed(cls, s: Any) -> "SetValues":
        # warm-up is a planning decision; it never carries over from a logged set
        return cls(
            reps=s.actual_reps,
            weight=s.actual_weight,
            time_seconds=s.actual_time_seconds,
            distance=s.actual_distance,
            rest_seconds=s.rest_seconds,
        )


def _by_set_number(rows: Sequence[Any], set_number: int) -> Any | None:
    for r in rows:
        if r.set_number == set_number:
            return r
    return rows[0] if rows else None


def prefill_next_set(
    set_number: int,
    planned: Sequence[Any],
    last_session: Sequence[Any],
    current: Sequence[Any],
) -> tuple[PrefillSource, SetValues] | None:
    """Suggest values for ``set_number`` of an exercise.

    Sources are tried in order: the template's planned sets, the sets the
    user logged for this exercise last time, then the set just logged in
    the current session. Within the first two, the row with the same set
    number wins and the first row is used when none matches.
    """
    planned_row = _by_set_number(planned, set_number)
    if planned_row is not None:
        return "planned", SetValues.from_planned(planned_row)

    last_row = _by_set_number(last_session, set_number)
    if last_row is not None:
        return "last_session", SetValues.from_performed(last_row)

    if current:
        previous = [s for s in current if s.set_number == set_number - 1]
        row = previous[0] if previous else max(current, key=lambda s: s.set_number)
        return "previous_set", SetValues.from_performed(row)

    return None


def set_volume(reps: int | None, weight: float | None) -> float:
    if not reps or not weight:
        return 0.0
    return float(reps) * float(weight)


def total_volume(sets: Iterable[Any]) -> float:
    return sum(set_volume(s.actual_reps, s.actual_weight) for s in sets)


def elapsed_seconds(started_at: datetime, ended_at: datetime | None, now: datetime) -> int:
    end = ended_at or now
    return max(0, int((end - started_at).total_seconds()))


@dataclass
class PerformedEntry:
    """One performed set flattened with the context PR detection needs."""

    exercise_id: int
    exercise_name: str
    performed_at: datetime
    weight: float | None = None
    time_seconds: int | None = None
    is_warmup: bool = False


@dataclass
class PersonalRecord:
    exercise_id: int
    exercise_name: str
    metric: RecordMetric
    value: float
    date: datetime
    is_new: bool


def detect_personal_records(entries: Iterable[PerformedEntry], now: datetime) -> list[PersonalRecord]:
    """Best set per exercise, newest record first.

    Weighted exercises use the heaviest weight; exercises that were only ever
    timed use the shortest time. ``date`` is the first time the record value
    was reached, so repeating a PR does not make it new again.
    """
    by_exercise: dict[int, list[PerformedEntry]] = {}
    for e in entries:
        if e.is_warmup:
            continue
        by_exercise.setdefault(e.exercise_id, []).append(e)

    records: list[PersonalRecord] = []
    for exercise_id, rows in by_exercise.items():
        rows.sort(key=lambda r: r.performed_at)
        weighted = [r for r in rows if r.weight is not None and r.weight > 0]
        timed = [r for r in rows if r.time_seconds is not None and r.time_seconds > 0]

        if weighted:
            metric: RecordMetric = "weight"
            value = max(r.weight for r in weighted)
            first = next(r for r in weighted if r.weight == value)
        elif timed:
            metric = "time"
            value = min(r.time_seconds for r in timed)
            first = next(r for r in timed if r.time_seconds == value)
        else:
            continue

        records.append(
            PersonalRecord(
                exercise_id=exercise_id,
                exercise_name=first.exercise_name,
                metric=metric,
                value=float(value),
                date=first.performed_at,
                is_new=now - first.performed_at <= PR_NEW_WINDOW,
            )
        )

    records.sort(key=lambda r: r.date, reverse=True)
    return records


@dataclass
class Adherence:
    adherence_pct: int
    logged_days: int
    denominator: int
    streak_days: int


def supplement_adherence(log_days: Iterable[date], created_at: datetime, now: datetime) -> Adherence:
    """Share of recent days with at least one log.

    The window is the last ``min(30, calendar days since the supplement was
    added)`` days ending today, and is never shorter than one day. The streak
    is counted inside the same 30-day strip.
    """
    today = now.date()
    days_since_created = (today - created_at.date()).days
    denominator = min(ADHERENCE_MAX_DAYS, max(1, days_since_created))

    window_start = today - timedelta(days=denominator - 1)
    days = set(log_days)
    logged = sum(1 for d in days if window_start <= d <= today)

    streak = 0
    cursor = today
    while streak < ADHERENCE_MAX_DAYS and cursor in days:
        streak += 1
        cursor -= timedelta(days=1)

    return Adherence(
        adherence_pct=round(100 * logged / denominator),
        logged_days=logged,
        denominator=denominator,
        streak_days=streak,
    )


def week_start(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


def weekly_streak(session_days: Iterable[date], today: date) -> int:
    """Consecutive weeks with at least one session.

    A week without a session yet does not break the streak until it is over,
    so counting starts from last week when this week is still empty.
    """
    weeks = {week_start(d) for d in session_days}
    cursor = week_start(today)
    if cursor not in weeks:
        cursor -= timedelta(days=7)

    streak = 0
    while cursor in weeks:
        streak += 1
        cursor -= timedelta(days=7)
    return streak


def range_start(range_key: str, today: date) -> date | None:
    """First day covered by an analytics range; None means no lower bound."""
    days = RANGE_DAYS.get(range_key)
    if days is None:
        return None
    return today - timedelta(days=days)


def moving_average(values: Sequence[float], window: int = 7, min_points: int = 3) -> list[float | None]:
    if len(values) < min_points:
        return [None] * len(values)

    out: list[float | None] = []
    for i in range(len(values)):
        chunk = values[max(0, i - window + 1): i + 1]
        out.append(round(sum(chunk) / len(chunk), 2))
    return out


def blocks_are_contiguous(block_ids: Sequence[int | None]) -> bool:
    """True when every block id appears as a single unbroken run."""
    seen: set[int] = set()
    prev: int | None = None
    for block_id in block_ids:
        if block_id is not None and block_id != prev:
            if block_id in seen:
                return False
            seen.add(block_id)
        prev = block_id
    return True


def splits_block(block_ids: Sequence[int | None], position: int) -> bool:
    """Would inserting a standalone row at 1-based ``position`` land inside a block?"""
    idx = position - 1
    if idx <= 0 or idx >= len(block_ids):
        return False
    before, after = block_ids[idx - 1], block_ids[idx]
    return before is not None and before == after


def group_rows(rows: Sequence[Any]) -> list[tuple[int | None, list[Any]]]:
    """Group position-ordered rows into standalone rows and circuit blocks.

    Returns ``(block_id, rows)`` pairs; standalone rows come back one per pair
    with ``block_id`` None.
    """
    groups: list[tuple[int | None, list[Any]]] = []
    for r in rows:
        block_id = r.circuit_block_id
        if block_id is not None and groups and groups[-1][0] == block_id:
            groups[-1][1].append(r)
        else:
            groups.append((block_id, [r]))
    return groups


def current_round(rounds: int, performed_counts: Sequence[int]) -> int:
    """Round a circuit is on: one past the fewest sets any member has logged."""
    if not performed_counts:
        return 1
    return max(1, min(rounds, min(performed_counts) + 1))


def member_rest_seconds(
    rest_after_seconds: int | None,
    rest_between_exercises: int | None,
    rest_between_rounds: int | None,
    is_last: bool,
) -> int | None:
    if rest_after_seconds is not None:
        return rest_after_seconds
    if is_last:
        return rest_between_rounds
    return rest_between_exercises


def copy_name(name: str, taken: Iterable[str]) -> str:
    """``"<name> (Copy)"``, then ``"<name> (Copy 2)"`` and so on."""
    existing = set(taken)
    candidate = f"{name} (Copy)"
    n = 2
    while candidate in existing:
        candidate = f"{name} (Copy {n})"
        n += 1
    return candidate
