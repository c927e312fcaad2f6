from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from conftest import create_exercise, register


def finished_session(client, headers, exercise_id, sets, end=True):
    session = client.post("/api/sessions/adhoc", headers=headers).json()
    row = client.post(
        f"/api/sessions/{session['id']}/exercises", json={"exercise_id": exercise_id}, headers=headers
    ).json()
    for values in sets:
        r = client.post(f"/api/sessions/{session['id']}/exercises/{row['id']}/sets", json=values, headers=headers)
        assert r.status_code == 201, r.text
    if end:
        client.post(f"/api/sessions/{session['id']}/end", headers=headers)
    return session


def test_overview_counts_finished_sessions_only(client: TestClient, auth):
    bench = create_exercise(client, auth, "Bench", category="Chest")
    finished_session(client, auth, bench["id"], [{"actual_reps": 10, "actual_weight": 100}, {"actual_reps": 8, "actual_weight": 120}])
    finished_session(client, auth, bench["id"], [{"actual_reps": 5, "actual_weight": 200}], end=False)

    r = client.get("/api/analytics/overview", headers=auth)
    assert r.status_code == 200
    overview = r.json()
    assert overview["workouts_this_week"] == 1
    assert overview["workouts_this_month"] == 1
    assert overview["weekly_streak"] == 1
    assert len(overview["weekly_volume"]) == 8
    assert overview["weekly_volume"][-1]["volume"] == 1960


def test_personal_records(client: TestClient, auth):
    bench = create_exercise(client, auth, "Bench", category="Chest")
    plank = create_exercise(client, auth, "Plank", category="Core", track_weight=False, track_reps=False, track_time=True)
    finished_session(
        client,
        auth,
        bench["id"],
        [
            {"actual_reps": 5, "actual_weight": 315, "is_warmup": True},
            {"actual_reps": 5, "actual_weight": 225},
        ],
    )
    finished_session(client, auth, plank["id"], [{"actual_time_seconds": 90}, {"actual_time_seconds": 75}])

    prs = {p["exercise_name"]: p for p in client.get("/api/analytics/prs", headers=auth).json()}
    assert prs["Bench"]["metric"] == "weight"
    assert prs["Bench"]["value"] == 225
    assert prs["Bench"]["is_new"] is True
    assert prs["Plank"]["metric"] == "time"
    assert prs["Plank"]["value"] == 75


def test_volume_views(client: TestClient, auth):
    bench = create_exercise(client, auth, "Bench", category="Chest")
    squat = create_exercise(client, auth, "Squat", category="Legs")
    finished_session(client, auth, bench["id"], [{"actual_reps": 10, "actual_weight": 100}])
    finished_session(client, auth, squat["id"], [{"actual_reps": 5, "actual_weight": 300}])

    volume = client.get("/api/analytics/volume", params={"range": "1mo"}, headers=auth).json()
    assert [v["volume"] for v in volume] == [1000, 1500]

    by_category = client.get("/api/analytics/volume-by-category", headers=auth).json()
    assert by_category == [{"category": "Legs", "volume": 1500}, {"category": "Chest", "volume": 1000}]

    durations = client.get("/api/analytics/sessions", params={"range": "all"}, headers=auth).json()
    assert len(durations) == 2
    assert all(d["duration_min"] >= 0 for d in durations)

    assert client.get("/api/analytics/volume", params={"range": "2wk"}, headers=auth).status_code == 400


def test_exercise_progress(client: TestClient, auth):
    bench = create_exercise(client, auth, "Bench")
    finished_session(
        client,
        auth,
        bench["id"],
        [{"actual_reps": 5, "actual_weight": 185}, {"actual_reps": 3, "actual_weight": 205}],
    )

    [point] = client.get(f"/api/analytics/exercise/{bench['id']}", headers=auth).json()
    assert point["max_weight"] == 205
    assert point["total_effort"] == 5 * 185 + 3 * 205
    assert point["total_sets"] == 2
    assert point["best_time"] is None

    other = register(client, "other@example.com")
    assert client.get(f"/api/analytics/exercise/{bench['id']}", headers=other).status_code == 404


def test_supplement_adherence_and_weight_trend(client: TestClient, auth):
    creatine = client.post("/api/supplements", json={"name": "Creatine", "default_dose": "5 g"}, headers=auth).json()
    client.post("/api/supplements/logs", json={"supplement_id": creatine["id"]}, headers=auth)

    [adherence] = client.get("/api/analytics/supplements", headers=auth).json()
    assert adherence["name"] == "Creatine"
    assert adherence["denominator"] == 1
    assert adherence["adherence_pct"] == 100
    assert adherence["streak_days"] == 1

    now = datetime.now(timezone.utc)
    for days_ago, weight in ((6, 182.0), (4, 181.0), (2, 180.5), (0, 180.0)):
        r = client.post(
            "/api/weight",
            json={"weight_lbs": weight, "logged_at": (now - timedelta(days=days_ago)).isoformat()},
            headers=auth,
        )
        assert r.status_code == 201

    trend = client.get("/api/analytics/weight", params={"range": "1mo"}, headers=auth).json()
    assert [p["weight_lbs"] for p in trend["points"]] == [182.0, 181.0, 180.5, 180.0]
    assert trend["points"][-1]["moving_avg"] == 180.88
    assert trend["current"] == 180.0
    assert trend["change"] == -2.0
    assert (trend["min"], trend["max"]) == (180.0, 182.0)
