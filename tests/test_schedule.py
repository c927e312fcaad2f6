from fastapi.testclient import TestClient

from conftest import create_template, register


def schedule(client, headers, template_id, day, **extra):
    r = client.post("/api/schedule", json={"template_id": template_id, "scheduled_date": day, **extra}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_schedule_day_week_and_range(client: TestClient, auth):
    t = create_template(client, auth, "Full Body")
    monday = schedule(client, auth, t["id"], "2026-06-01")
    schedule(client, auth, t["id"], "2026-06-03")
    schedule(client, auth, t["id"], "2026-06-09")

    assert monday["status"] == "planned"
    assert monday["template"] == {"id": t["id"], "name": "Full Body"}

    day = client.get("/api/schedule/2026-06-01", headers=auth).json()
    assert [i["id"] for i in day] == [monday["id"]]

    week = client.get("/api/schedule/week/2026-06-01", headers=auth).json()
    assert [i["scheduled_date"] for i in week] == ["2026-06-01", "2026-06-03"]

    span = client.get("/api/schedule/range/2026-06-01/2026-06-30", headers=auth).json()
    assert len(span) == 3

    assert client.get("/api/schedule/range/2026-06-30/2026-06-01", headers=auth).status_code == 400


def test_schedule_update_and_delete(client: TestClient, auth):
    t = create_template(client, auth)
    item = schedule(client, auth, t["id"], "2026-06-01")

    r = client.patch(f"/api/schedule/{item['id']}", json={"status": "skipped"}, headers=auth)
    assert r.status_code == 200
    assert r.json()["status"] == "skipped"
    assert r.json()["scheduled_date"] == "2026-06-01"

    r = client.patch(f"/api/schedule/{item['id']}", json={"status": "later"}, headers=auth)
    assert r.status_code == 400

    assert client.delete(f"/api/schedule/{item['id']}", headers=auth).status_code == 204
    assert client.get("/api/schedule/2026-06-01", headers=auth).json() == []


def test_cannot_schedule_someone_elses_template(client: TestClient, auth):
    t = create_template(client, auth)
    other = register(client, "other@example.com")
    r = client.post("/api/schedule", json={"template_id": t["id"], "scheduled_date": "2026-06-01"}, headers=other)
    assert r.status_code == 404

    item = schedule(client, auth, t["id"], "2026-06-01")
    assert client.patch(f"/api/schedule/{item['id']}", json={"status": "skipped"}, headers=other).status_code == 404
    assert client.get("/api/schedule/2026-06-01", headers=other).json() == []
