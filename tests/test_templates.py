from fastapi.testclient import TestClient

from conftest import create_circuit, create_exercise, create_template, register


def add_row(client, headers, template_id, exercise_id, **extra):
    r = client.post(
        f"/api/templates/{template_id}/exercises",
        json={"exercise_id": exercise_id, **extra},
        headers=headers,
    )
    return r


def layout(client, headers, template_id):
    detail = client.get(f"/api/templates/{template_id}", headers=headers).json()
    return [(r["exercise"]["name"], r["position"], r["circuit_block_id"]) for r in detail["exercises"]]


def test_template_crud_and_listing(client: TestClient, auth):
    t = create_template(client, auth, "Upper A")
    ex = create_exercise(client, auth, "Row")
    add_row(client, auth, t["id"], ex["id"])

    listing = client.get("/api/templates", headers=auth).json()
    assert [(x["name"], x["exercise_count"]) for x in listing] == [("Upper A", 1)]

    r = client.patch(f"/api/templates/{t['id']}", json={"notes": "heavy week"}, headers=auth)
    assert r.status_code == 200
    assert r.json()["notes"] == "heavy week"

    other = register(client, "other@example.com")
    assert client.get(f"/api/templates/{t['id']}", headers=other).status_code == 404

    assert client.delete(f"/api/templates/{t['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/templates/{t['id']}", headers=auth).status_code == 404


def test_insert_exercise_at_position_shifts_rows(client: TestClient, auth):
    t = create_template(client, auth)
    a, b, c = (create_exercise(client, auth, n) for n in ("A", "B", "C"))
    add_row(client, auth, t["id"], a["id"])
    add_row(client, auth, t["id"], b["id"])

    r = add_row(client, auth, t["id"], c["id"], position=1)
    assert r.status_code == 201
    assert [(n, p) for n, p, _ in layout(client, auth, t["id"])] == [("C", 1), ("A", 2), ("B", 3)]


def test_add_and_remove_circuit_keeps_relative_order(client: TestClient, auth):
    t = create_template(client, auth)
    a, b, x, y = (create_exercise(client, auth, n) for n in ("A", "B", "X", "Y"))
    add_row(client, auth, t["id"], a["id"])
    add_row(client, auth, t["id"], b["id"])
    circuit = create_circuit(client, auth, "Pair", [x["id"], y["id"]], rounds=3)

    r = client.post(
        f"/api/templates/{t['id']}/circuits",
        json={"circuit_id": circuit["id"], "position": 2},
        headers=auth,
    )
    assert r.status_code == 201
    block = r.json()
    assert block["rounds"] == 3
    assert block["name"] == "Pair"

    assert layout(client, auth, t["id"]) == [
        ("A", 1, None),
        ("X", 2, block["id"]),
        ("Y", 3, block["id"]),
        ("B", 4, None),
    ]

    detail = client.get(f"/api/templates/{t['id']}", headers=auth).json()
    assert [item["type"] for item in detail["items"]] == ["exercise", "circuit", "exercise"]
    circuit_rows = [r for r in detail["exercises"] if r["circuit_block_id"] == block["id"]]
    for row in circuit_rows:
        assert [s["set_number"] for s in row["planned_sets"]] == [1, 2, 3]
        assert all(s["target_reps"] == 12 for s in row["planned_sets"])

    # standalone rows cannot land inside the block
    assert add_row(client, auth, t["id"], a["id"], position=3).status_code == 400

    assert client.delete(f"/api/templates/{t['id']}/circuits/{block['id']}", headers=auth).status_code == 204
    assert layout(client, auth, t["id"]) == [("A", 1, None), ("B", 2, None)]


def test_adding_empty_circuit_is_rejected(client: TestClient, auth):
    t = create_template(client, auth)
    circuit = client.post("/api/circuits", json={"name": "Empty"}, headers=auth).json()
    r = client.post(f"/api/templates/{t['id']}/circuits", json={"circuit_id": circuit["id"]}, headers=auth)
    assert r.status_code == 400


def test_reorder_rejects_split_blocks_and_bad_lists(client: TestClient, auth):
    t = create_template(client, auth)
    a, x, y = (create_exercise(client, auth, n) for n in ("A", "X", "Y"))
    add_row(client, auth, t["id"], a["id"])
    circuit = create_circuit(client, auth, "Pair", [x["id"], y["id"]], rounds=2)
    client.post(f"/api/templates/{t['id']}/circuits", json={"circuit_id": circuit["id"]}, headers=auth)

    rows = client.get(f"/api/templates/{t['id']}", headers=auth).json()["exercises"]
    row_a, row_x, row_y = (r["id"] for r in rows)

    split = client.patch(
        f"/api/templates/{t['id']}/exercises/reorder",
        json={"exercise_ids": [row_x, row_a, row_y]},
        headers=auth,
    )
    assert split.status_code == 400

    missing = client.patch(
        f"/api/templates/{t['id']}/exercises/reorder",
        json={"exercise_ids": [row_x, row_y]},
        headers=auth,
    )
    assert missing.status_code == 400

    ok = client.patch(
        f"/api/templates/{t['id']}/exercises/reorder",
        json={"exercise_ids": [row_x, row_y, row_a]},
        headers=auth,
    )
    assert ok.status_code == 200
    assert [n for n, _, _ in layout(client, auth, t["id"])] == ["X", "Y", "A"]


def test_updating_rounds_adds_or_trims_planned_sets(client: TestClient, auth):
    t = create_template(client, auth)
    x = create_exercise(client, auth, "X")
    circuit = create_circuit(client, auth, "Solo", [x["id"]], rounds=2)
    block = client.post(
        f"/api/templates/{t['id']}/circuits", json={"circuit_id": circuit["id"]}, headers=auth
    ).json()

    r = client.patch(f"/api/templates/{t['id']}/circuits/{block['id']}", json={"rounds": 4}, headers=auth)
    assert r.status_code == 200
    assert r.json()["rounds"] == 4
    row = client.get(f"/api/templates/{t['id']}", headers=auth).json()["exercises"][0]
    assert row["circuit_rounds"] == 4
    assert [s["set_number"] for s in row["planned_sets"]] == [1, 2, 3, 4]
    assert all(s["target_reps"] == 12 for s in row["planned_sets"])

    client.patch(f"/api/templates/{t['id']}/circuits/{block['id']}", json={"rounds": 1}, headers=auth)
    row = client.get(f"/api/templates/{t['id']}", headers=auth).json()["exercises"][0]
    assert [s["set_number"] for s in row["planned_sets"]] == [1]


def test_planned_sets_crud_and_reorder(client: TestClient, auth):
    t = create_template(client, auth)
    ex = create_exercise(client, auth, "Bench")
    row = add_row(client, auth, t["id"], ex["id"]).json()
    base = f"/api/templates/{t['id']}/exercises/{row['id']}/sets"

    s1 = client.post(base, json={"target_reps": 5, "target_weight": 135, "is_warmup": True}, headers=auth).json()
    s2 = client.post(base, json={"target_reps": 5, "target_weight": 185}, headers=auth).json()
    s3 = client.post(base, json={"target_reps": 5, "target_weight": 205}, headers=auth).json()
    assert [s1["set_number"], s2["set_number"], s3["set_number"]] == [1, 2, 3]

    r = client.patch(f"{base}/{s2['id']}", json={"target_weight": 190}, headers=auth)
    assert r.status_code == 200
    assert r.json()["target_weight"] == 190
    assert r.json()["target_reps"] == 5

    r = client.post(f"{base}/reorder", json={"set_ids": [s3["id"], s1["id"], s2["id"]]}, headers=auth)
    assert r.status_code == 200
    assert [(s["id"], s["set_number"]) for s in r.json()] == [(s3["id"], 1), (s1["id"], 2), (s2["id"], 3)]

    assert client.post(f"{base}/reorder", json={"set_ids": [s1["id"]]}, headers=auth).status_code == 400

    assert client.delete(f"{base}/{s1['id']}", headers=auth).status_code == 204
    remaining = client.get(f"/api/templates/{t['id']}", headers=auth).json()["exercises"][0]["planned_sets"]
    assert [s["id"] for s in remaining] == [s3["id"], s2["id"]]


def test_copy_template_duplicates_rows_blocks_and_sets(client: TestClient, auth):
    t = create_template(client, auth, "Pull")
    a, x = (create_exercise(client, auth, n) for n in ("A", "X"))
    row = add_row(client, auth, t["id"], a["id"]).json()
    client.post(f"/api/templates/{t['id']}/exercises/{row['id']}/sets", json={"target_reps": 8}, headers=auth)
    circuit = create_circuit(client, auth, "Solo", [x["id"]], rounds=2)
    client.post(f"/api/templates/{t['id']}/circuits", json={"circuit_id": circuit["id"]}, headers=auth)

    r = client.post(f"/api/templates/{t['id']}/copy", headers=auth)
    assert r.status_code == 201
    copy = r.json()
    assert copy["name"] == "Pull (Copy)"

    original = client.get(f"/api/templates/{t['id']}", headers=auth).json()
    copied = client.get(f"/api/templates/{copy['id']}", headers=auth).json()
    assert [(r["exercise_id"], r["position"]) for r in copied["exercises"]] == [
        (r["exercise_id"], r["position"]) for r in original["exercises"]
    ]
    assert [len(r["planned_sets"]) for r in copied["exercises"]] == [1, 2]
    assert copied["circuit_blocks"][0]["id"] != original["circuit_blocks"][0]["id"]
    assert copied["exercises"][1]["circuit_block_id"] == copied["circuit_blocks"][0]["id"]


def test_deleting_template_keeps_finished_sessions(client: TestClient, auth):
    t = create_template(client, auth)
    ex = create_exercise(client, auth, "Dip")
    add_row(client, auth, t["id"], ex["id"])
    schedule = client.post(
        "/api/schedule", json={"template_id": t["id"], "scheduled_date": "2026-05-04"}, headers=auth
    ).json()
    session = client.post(f"/api/sessions/start/{schedule['id']}", headers=auth).json()
    client.post(f"/api/sessions/{session['id']}/end", headers=auth)

    assert client.delete(f"/api/templates/{t['id']}", headers=auth).status_code == 204

    kept = client.get(f"/api/sessions/{session['id']}", headers=auth).json()
    assert kept["template_id"] is None
    assert kept["schedule_id"] is None
    assert kept["exercises"][0]["exercise_name"] == "Dip"
    assert client.get("/api/schedule/2026-05-04", headers=auth).json() == []


def test_null_for_required_field_is_rejected(client: TestClient, auth):
    t = create_template(client, auth, "Pull Day")
    ex = create_exercise(client, auth, "Row")
    row = add_row(client, auth, t["id"], ex["id"]).json()
    planned = client.post(
        f"/api/templates/{t['id']}/exercises/{row['id']}/sets", json={"target_reps": 8}, headers=auth
    ).json()
    set_url = f"/api/templates/{t['id']}/exercises/{row['id']}/sets/{planned['id']}"

    assert client.patch(f"/api/templates/{t['id']}", json={"name": None}, headers=auth).status_code == 400
    assert client.patch(set_url, json={"is_warmup": None}, headers=auth).status_code == 400
    assert client.patch(set_url, json={"set_number": None}, headers=auth).status_code == 400

    r = client.patch(set_url, json={"target_weight": None}, headers=auth)
    assert r.status_code == 200
    assert (r.json()["set_number"], r.json()["is_warmup"]) == (1, False)
    assert [s["name"] for s in client.get("/api/templates", headers=auth).json()] == ["Pull Day"]
