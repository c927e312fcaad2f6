from fastapi.testclient import TestClient

from conftest import create_exercise, create_template, register


def names(r):
    return [e["name"] for e in r.json()]


def test_library_lists_system_and_own_exercises(client: TestClient, auth, seed_system_exercise):
    seed_system_exercise("Bench Press")
    create_exercise(client, auth, "Cable Fly", category="Chest")

    r = client.get("/api/exercises", headers=auth)
    assert r.status_code == 200
    assert names(r) == ["Bench Press", "Cable Fly"]

    other = register(client, "other@example.com")
    assert names(client.get("/api/exercises", headers=other)) == ["Bench Press"]


def test_create_duplicate_name_conflicts(client: TestClient, auth):
    create_exercise(client, auth, "Curl")
    r = client.post("/api/exercises", json={"name": "Curl"}, headers=auth)
    assert r.status_code == 409


def test_hiding_system_exercise_is_per_user(client: TestClient, auth, seed_system_exercise):
    bench = seed_system_exercise("Bench Press")
    other = register(client, "other@example.com")

    r = client.delete(f"/api/exercises/{bench}", headers=auth)
    assert r.status_code == 204
    # hiding twice is fine
    assert client.delete(f"/api/exercises/{bench}", headers=auth).status_code == 204

    assert names(client.get("/api/exercises", headers=auth)) == []
    assert names(client.get("/api/exercises/hidden", headers=auth)) == ["Bench Press"]
    assert names(client.get("/api/exercises", headers=other)) == ["Bench Press"]

    r = client.post(f"/api/exercises/{bench}/restore", headers=auth)
    assert r.status_code == 204
    assert names(client.get("/api/exercises", headers=auth)) == ["Bench Press"]
    assert client.post(f"/api/exercises/{bench}/restore", headers=auth).status_code == 404


def test_system_exercise_is_read_only_but_copyable(client: TestClient, auth, seed_system_exercise):
    bench = seed_system_exercise("Bench Press", category="Chest", track_time=True)

    r = client.patch(f"/api/exercises/{bench}", json={"name": "Mine"}, headers=auth)
    assert r.status_code == 400

    r1 = client.post(f"/api/exercises/{bench}/copy", headers=auth)
    assert r1.status_code == 201
    copy = r1.json()
    assert copy["name"] == "Bench Press (Copy)"
    assert copy["is_system"] is False
    assert copy["category"] == "Chest"
    assert copy["track_time"] is True

    r2 = client.post(f"/api/exercises/{bench}/copy", headers=auth)
    assert r2.json()["name"] == "Bench Press (Copy 2)"

    r3 = client.patch(f"/api/exercises/{copy['id']}", json={"notes": "pause at chest"}, headers=auth)
    assert r3.status_code == 200
    assert r3.json()["notes"] == "pause at chest"


def test_other_users_custom_exercise_is_not_found(client: TestClient, auth):
    mine = create_exercise(client, auth, "Secret Lift")
    other = register(client, "other@example.com")

    assert client.get(f"/api/exercises/{mine['id']}", headers=other).status_code == 404
    assert client.patch(f"/api/exercises/{mine['id']}", json={"notes": "x"}, headers=other).status_code == 404
    assert client.delete(f"/api/exercises/{mine['id']}", headers=other).status_code == 404


def test_deleting_custom_exercise_removes_template_rows_and_keeps_history(client: TestClient, auth):
    squat = create_exercise(client, auth, "Box Squat")
    press = create_exercise(client, auth, "Push Press")
    template = create_template(client, auth, "Legs")
    for ex in (squat, press):
        client.post(f"/api/templates/{template['id']}/exercises", json={"exercise_id": ex["id"]}, headers=auth)

    session = client.post(f"/api/sessions/start-from-template/{template['id']}", headers=auth).json()
    detail = client.get(f"/api/sessions/{session['id']}", headers=auth).json()
    row = detail["exercises"][0]
    client.post(
        f"/api/sessions/{session['id']}/exercises/{row['id']}/sets",
        json={"actual_reps": 5, "actual_weight": 225},
        headers=auth,
    )
    client.post(f"/api/sessions/{session['id']}/end", headers=auth)

    assert client.delete(f"/api/exercises/{squat['id']}", headers=auth).status_code == 204

    rows = client.get(f"/api/templates/{template['id']}", headers=auth).json()["exercises"]
    assert [(r["exercise_id"], r["position"]) for r in rows] == [(press["id"], 1)]

    detail = client.get(f"/api/sessions/{session['id']}", headers=auth).json()
    first = detail["exercises"][0]
    assert first["exercise_id"] is None
    assert first["exercise_name"] == "Box Squat"
    assert len(first["sets"]) == 1


def test_performed_list_and_history(client: TestClient, auth, seed_system_exercise):
    bench = seed_system_exercise("Bench Press")
    create_exercise(client, auth, "Never Done")

    session = client.post("/api/sessions/adhoc", headers=auth).json()
    row = client.post(f"/api/sessions/{session['id']}/exercises", json={"exercise_id": bench}, headers=auth).json()
    for weight in (135, 155):
        client.post(
            f"/api/sessions/{session['id']}/exercises/{row['id']}/sets",
            json={"actual_reps": 8, "actual_weight": weight},
            headers=auth,
        )

    assert names(client.get("/api/exercises/performed", headers=auth)) == ["Bench Press"]

    history = client.get(f"/api/exercises/{bench}/history", headers=auth).json()
    assert [h["actual_weight"] for h in history] == [135, 155]
    assert [h["set_number"] for h in history] == [1, 2]
    assert history[0]["session_id"] == session["id"]


def test_null_for_required_field_is_rejected(client: TestClient, auth):
    ex = create_exercise(client, auth, "Front Squat", notes="high bar")

    for field in ("name", "track_weight", "weight_unit"):
        r = client.patch(f"/api/exercises/{ex['id']}", json={field: None}, headers=auth)
        assert r.status_code == 400, field
        assert field in r.json()["detail"]

    # nullable fields may still be cleared
    r = client.patch(f"/api/exercises/{ex['id']}", json={"notes": None}, headers=auth)
    assert r.status_code == 200
    assert r.json()["notes"] is None

    current = client.get(f"/api/exercises/{ex['id']}", headers=auth).json()
    assert (current["name"], current["track_weight"], current["weight_unit"]) == ("Front Squat", True, "lbs")
