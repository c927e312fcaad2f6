from fastapi.testclient import TestClient

from conftest import create_circuit, create_exercise, register


def test_create_circuit_with_members(client: TestClient, auth):
    a = create_exercise(client, auth, "Burpee")
    b = create_exercise(client, auth, "Kettlebell Swing")
    circuit = create_circuit(client, auth, "Finisher", [a["id"], b["id"]], rounds=4)

    r = client.get(f"/api/circuits/{circuit['id']}", headers=auth)
    assert r.status_code == 200
    detail = r.json()
    assert detail["rounds"] == 4
    assert [(m["exercise_name"], m["position"]) for m in detail["exercises"]] == [
        ("Burpee", 1),
        ("Kettlebell Swing", 2),
    ]

    listing = client.get("/api/circuits", headers=auth).json()
    assert [(c["name"], c["exercise_count"]) for c in listing] == [("Finisher", 2)]


def test_member_insert_reorder_and_delete_keep_positions_dense(client: TestClient, auth):
    ids = [create_exercise(client, auth, n)["id"] for n in ("A", "B", "C")]
    circuit = create_circuit(client, auth, "Triplet", ids[:2])

    r = client.post(
        f"/api/circuits/{circuit['id']}/exercises",
        json={"exercise_id": ids[2], "position": 1},
        headers=auth,
    )
    assert r.status_code == 201
    assert r.json()["position"] == 1

    members = client.get(f"/api/circuits/{circuit['id']}", headers=auth).json()["exercises"]
    assert [m["exercise_name"] for m in members] == ["C", "A", "B"]

    member_ids = [m["id"] for m in members]
    r = client.patch(
        f"/api/circuits/{circuit['id']}/exercises/reorder",
        json={"exercise_ids": list(reversed(member_ids))},
        headers=auth,
    )
    assert r.status_code == 200
    assert [m["position"] for m in r.json()] == [1, 2, 3]

    r = client.patch(
        f"/api/circuits/{circuit['id']}/exercises/reorder",
        json={"exercise_ids": member_ids[:2]},
        headers=auth,
    )
    assert r.status_code == 400

    assert client.delete(f"/api/circuits/{circuit['id']}/exercises/{member_ids[2]}", headers=auth).status_code == 204
    members = client.get(f"/api/circuits/{circuit['id']}", headers=auth).json()["exercises"]
    assert [(m["exercise_name"], m["position"]) for m in members] == [("A", 1), ("C", 2)]


def test_system_circuit_hide_copy_restore(client: TestClient, auth, seed_system_exercise, seed_system_circuit):
    squat = seed_system_exercise("Air Squat", category="Legs")
    lunge = seed_system_exercise("Lunge", category="Legs")
    circuit_id = seed_system_circuit("Leg Burner", [squat, lunge], rounds=3)
    other = register(client, "other@example.com")

    assert client.patch(f"/api/circuits/{circuit_id}", json={"rounds": 5}, headers=auth).status_code == 400
    r = client.post(f"/api/circuits/{circuit_id}/exercises", json={"exercise_id": squat}, headers=auth)
    assert r.status_code == 400

    r = client.post(f"/api/circuits/{circuit_id}/copy", headers=auth)
    assert r.status_code == 201
    copy = r.json()
    assert copy["name"] == "Leg Burner (Copy)"
    assert copy["is_system"] is False
    copied = client.get(f"/api/circuits/{copy['id']}", headers=auth).json()
    assert [m["exercise_name"] for m in copied["exercises"]] == ["Air Squat", "Lunge"]

    assert client.delete(f"/api/circuits/{circuit_id}", headers=auth).status_code == 204
    mine = [c["name"] for c in client.get("/api/circuits", headers=auth).json()]
    assert mine == ["Leg Burner (Copy)"]
    assert [c["name"] for c in client.get("/api/circuits/hidden", headers=auth).json()] == ["Leg Burner"]
    assert [c["name"] for c in client.get("/api/circuits", headers=other).json()] == ["Leg Burner"]

    assert client.post(f"/api/circuits/{circuit_id}/restore", headers=auth).status_code == 204
    assert len(client.get("/api/circuits", headers=auth).json()) == 2


def test_circuit_name_unique_per_user(client: TestClient, auth):
    assert client.post("/api/circuits", json={"name": "EMOM"}, headers=auth).status_code == 201
    assert client.post("/api/circuits", json={"name": "EMOM"}, headers=auth).status_code == 409

    other = register(client, "other@example.com")
    assert client.post("/api/circuits", json={"name": "EMOM"}, headers=other).status_code == 201


def test_deleting_custom_circuit_detaches_template_blocks(client: TestClient, auth):
    a = create_exercise(client, auth, "Push-up")
    circuit = create_circuit(client, auth, "Quick", [a["id"]], rounds=2)
    template = client.post("/api/templates", json={"name": "Day"}, headers=auth).json()
    r = client.post(f"/api/templates/{template['id']}/circuits", json={"circuit_id": circuit["id"]}, headers=auth)
    assert r.status_code == 201

    assert client.delete(f"/api/circuits/{circuit['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/circuits/{circuit['id']}", headers=auth).status_code == 404

    detail = client.get(f"/api/templates/{template['id']}", headers=auth).json()
    assert detail["circuit_blocks"][0]["circuit_id"] is None
    assert detail["circuit_blocks"][0]["name"] == "Quick"
    assert len(detail["exercises"]) == 1


def test_null_name_or_rounds_is_rejected(client: TestClient, auth):
    circuit = create_circuit(client, auth, "Finisher", [], rounds=4)

    assert client.patch(f"/api/circuits/{circuit['id']}", json={"name": None}, headers=auth).status_code == 400
    assert client.patch(f"/api/circuits/{circuit['id']}", json={"rounds": None}, headers=auth).status_code == 400

    detail = client.get(f"/api/circuits/{circuit['id']}", headers=auth).json()
    assert (detail["name"], detail["rounds"]) == ("Finisher", 4)
