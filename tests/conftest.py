import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from liftlog.core.db import Base, get_db
from liftlog.models import registry  # noqa: F401
from liftlog.models.circuit import Circuit
from liftlog.models.circuit_exercise import CircuitExercise
from liftlog.models.exercise import Exercise


@pytest.fixture()
def db_path(tmp_path):
    path = tmp_path / "liftlog_test.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture()
def sync_engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture()
def client(db_path):
    from liftlog.main import app

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    TestSessionLocal = async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )

    async def override_get_db():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "lifter@example.com", password: str = "secret123") -> dict:
    """Register a user and return auth headers for them."""
    r = client.post("/api/auth/register", json={"email": email, "password": password, "first_name": "Sam"})
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def auth(client):
    return register(client)


@pytest.fixture()
def seed_system_exercise(sync_engine):
    def _seed(name: str, category: str | None = "Chest", **fields) -> int:
        with Session(sync_engine) as s:
            exercise = Exercise(name=name, category=category, is_system=True, user_id=None, **fields)
            s.add(exercise)
            s.commit()
            return exercise.id

    return _seed


@pytest.fixture()
def seed_system_circuit(sync_engine):
    def _seed(name: str, exercise_ids: list[int], rounds: int = 3) -> int:
        with Session(sync_engine) as s:
            circuit = Circuit(name=name, rounds=rounds, is_system=True, user_id=None)
            s.add(circuit)
            s.flush()
            for position, exercise_id in enumerate(exercise_ids, start=1):
                s.add(CircuitExercise(circuit_id=circuit.id, exercise_id=exercise_id, position=position, default_reps=10))
            s.commit()
            return circuit.id

    return _seed


def create_exercise(client: TestClient, headers: dict, name: str, **fields) -> dict:
    r = client.post("/api/exercises", json={"name": name, **fields}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_template(client: TestClient, headers: dict, name: str = "Push Day") -> dict:
    r = client.post("/api/templates", json={"name": name}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_circuit(client: TestClient, headers: dict, name: str, exercise_ids: list[int], rounds: int = 3) -> dict:
    r = client.post("/api/circuits", json={"name": name, "rounds": rounds}, headers=headers)
    assert r.status_code == 201, r.text
    circuit = r.json()
    for exercise_id in exercise_ids:
        r = client.post(
            f"/api/circuits/{circuit['id']}/exercises",
            json={"exercise_id": exercise_id, "default_reps": 12},
            headers=headers,
        )
        assert r.status_code == 201, r.text
    return circuit
