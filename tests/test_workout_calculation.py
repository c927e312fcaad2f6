from datetime import date, datetime, timedelta
from types import SimpleNamespace

from liftlog.workout_calculation import (
    PerformedEntry,
    blocks_are_contiguous,
    copy_name,
    current_round,
    detect_personal_records,
    elapsed_seconds,
    group_rows,
    member_rest_seconds,
    moving_average,
    prefill_next_set,
    range_start,
    splits_block,
    supplement_adherence,
    total_volume,
    week_start,
    weekly_streak,
)


def planned(set_number, reps=None, weight=None, warmup=False):
    return SimpleNamespace(
        set_number=set_number,
        target_reps=reps,
        target_weight=weight,
        target_time_seconds=None,
        target_distance=None,
        rest_seconds=90,
        is_warmup=warmup,
    )


def performed(set_number, reps=None, weight=None, warmup=False):
    return SimpleNamespace(
        set_number=set_number,
        actual_reps=reps,
        actual_weight=weight,
        actual_time_seconds=None,
        actual_distance=None,
        rest_seconds=60,
        is_warmup=warmup,
    )


# --- prefill ---

def test_prefill_prefers_planned_set_with_same_number():
    source, values = prefill_next_set(
        2,
        planned=[planned(1, 5, 100), planned(2, 8, 120)],
        last_session=[performed(2, 10, 200)],
        current=[performed(1, 5, 100)],
    )
    assert source == "planned"
    assert (values.reps, values.weight) == (8, 120)


def test_prefill_uses_first_planned_row_when_number_is_past_the_plan():
    source, values = prefill_next_set(4, planned=[planned(1, 5, 100), planned(2, 8, 120)], last_session=[], current=[])
    assert source == "planned"
    assert values.reps == 5


def test_prefill_falls_back_to_last_session():
    source, values = prefill_next_set(
        1,
        planned=[],
        last_session=[performed(1, 10, 135, warmup=True), performed(2, 8, 155)],
        current=[],
    )
    assert source == "last_session"
    assert (values.reps, values.weight) == (10, 135)
    assert values.is_warmup is False


def test_prefill_falls_back_to_previous_set_in_this_session():
    source, values = prefill_next_set(3, planned=[], last_session=[], current=[performed(1, 5, 50), performed(2, 6, 60)])
    assert source == "previous_set"
    assert values.weight == 60


def test_prefill_returns_none_without_any_source():
    assert prefill_next_set(1, planned=[], last_session=[], current=[]) is None


# --- volume / duration ---

def test_total_volume_sums_reps_times_weight():
    sets = [performed(1, 10, 100), performed(2, 8, 120), performed(3, None, 50), performed(4, 12, None)]
    assert total_volume(sets) == 1960


def test_elapsed_seconds_uses_now_while_running():
    start = datetime(2026, 1, 5, 10, 0, 0)
    assert elapsed_seconds(start, None, start + timedelta(minutes=3)) == 180
    assert elapsed_seconds(start, start + timedelta(minutes=45), start + timedelta(days=1)) == 2700


# --- personal records ---

def test_personal_record_keeps_first_date_reached_and_skips_warmups():
    now = datetime(2026, 3, 20, 12, 0)
    entries = [
        PerformedEntry(1, "Bench Press", now - timedelta(days=30), weight=185),
        PerformedEntry(1, "Bench Press", now - timedelta(days=20), weight=205),
        PerformedEntry(1, "Bench Press", now - timedelta(days=2), weight=205),
        PerformedEntry(1, "Bench Press", now - timedelta(days=1), weight=315, is_warmup=True),
    ]
    [pr] = detect_personal_records(entries, now)
    assert pr.metric == "weight"
    assert pr.value == 205
    assert pr.date == now - timedelta(days=20)
    assert pr.is_new is False


def test_timed_only_exercise_records_shortest_time():
    now = datetime(2026, 3, 20, 12, 0)
    entries = [
        PerformedEntry(7, "Row 500m", now - timedelta(days=10), time_seconds=110),
        PerformedEntry(7, "Row 500m", now - timedelta(days=3), time_seconds=104),
    ]
    [pr] = detect_personal_records(entries, now)
    assert pr.metric == "time"
    assert pr.value == 104
    assert pr.is_new is True


def test_records_sorted_newest_first():
    now = datetime(2026, 3, 20)
    entries = [
        PerformedEntry(1, "Squat", now - timedelta(days=40), weight=225),
        PerformedEntry(2, "Deadlift", now - timedelta(days=1), weight=315),
    ]
    assert [r.exercise_name for r in detect_personal_records(entries, now)] == ["Deadlift", "Squat"]


# --- adherence / streaks ---

def test_adherence_window_is_capped_by_days_since_created():
    now = datetime(2026, 4, 10, 20, 0)
    created = now - timedelta(days=4)
    days = {date(2026, 4, 10), date(2026, 4, 9), date(2026, 4, 7)}
    a = supplement_adherence(days, created, now)
    assert a.denominator == 4
    assert a.logged_days == 3
    assert a.adherence_pct == 75
    assert a.streak_days == 2


def test_adherence_window_never_longer_than_thirty_days():
    now = datetime(2026, 4, 10)
    a = supplement_adherence([now.date()], now - timedelta(days=400), now)
    assert a.denominator == 30
    assert a.adherence_pct == 3


def test_adherence_counts_calendar_days_across_midnight():
    # added late on the 16th, viewed early on the 19th: 16th, 17th and 18th count
    a = supplement_adherence([date(2026, 10, 19)], datetime(2026, 10, 16, 23), datetime(2026, 10, 19, 8))
    assert a.denominator == 3
    assert a.adherence_pct == 33
    assert a.streak_days == 1


def test_adherence_streak_stays_inside_thirty_day_strip():
    now = datetime(2026, 4, 10, 9)
    every_day = [now.date() - timedelta(days=i) for i in range(45)]
    a = supplement_adherence(every_day, now - timedelta(days=60), now)
    assert a.streak_days == 30
    assert a.logged_days == 30
    assert a.adherence_pct == 100


def test_weekly_streak_does_not_break_on_current_empty_week():
    today = date(2026, 3, 18)  # Wednesday
    this_monday = week_start(today)
    days = [this_monday - timedelta(days=7), this_monday - timedelta(days=12), this_monday - timedelta(days=20)]
    assert weekly_streak(days, today) == 3
    assert weekly_streak(days + [today], today) == 4
    assert weekly_streak([this_monday - timedelta(days=21)], today) == 0


def test_range_start():
    today = date(2026, 6, 30)
    assert range_start("1mo", today) == date(2026, 5, 31)
    assert range_start("all", today) is None


def test_moving_average_needs_three_points():
    assert moving_average([180.0, 181.0]) == [None, None]
    assert moving_average([180.0, 182.0, 184.0]) == [180.0, 181.0, 182.0]


# --- ordering helpers ---

def test_blocks_are_contiguous():
    assert blocks_are_contiguous([None, 5, 5, None, 6, 6])
    assert not blocks_are_contiguous([5, None, 5])


def test_splits_block_only_inside_a_run():
    ids = [None, 4, 4, 4, None]
    assert splits_block(ids, 3)
    assert not splits_block(ids, 2)
    assert not splits_block(ids, 5)
    assert not splits_block(ids, 6)


def test_group_rows():
    rows = [SimpleNamespace(id=i, circuit_block_id=b) for i, b in [(1, None), (2, 9), (3, 9), (4, None)]]
    assert [(b, [r.id for r in g]) for b, g in group_rows(rows)] == [(None, [1]), (9, [2, 3]), (None, [4])]


def test_current_round():
    assert current_round(3, []) == 1
    assert current_round(3, [2, 1, 2]) == 2
    assert current_round(3, [3, 3]) == 3


def test_member_rest_seconds():
    assert member_rest_seconds(15, 30, 120, is_last=True) == 15
    assert member_rest_seconds(None, 30, 120, is_last=False) == 30
    assert member_rest_seconds(None, 30, 120, is_last=True) == 120


def test_copy_name_counts_up():
    assert copy_name("Bench", []) == "Bench (Copy)"
    assert copy_name("Bench", ["Bench (Copy)"]) == "Bench (Copy 2)"
    assert copy_name("Bench", ["Bench (Copy)", "Bench (Copy 2)"]) == "Bench (Copy 3)"
