"""
conftest.py
===========
Shared fixtures: an isolated SQLite database per test, a controllable clock,
a FastAPI test client with seeded demo accounts, and login helpers.
"""

import datetime
import os
import sys

# Ensure the package is discoverable by Python when running from /tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient

from jeevrakshak.config import Settings
from jeevrakshak.db import init_db, make_engine, make_session_factory
from jeevrakshak.main import create_app
from jeevrakshak.models import Base
from jeevrakshak.request_store import RequestStore


class FakeClock:
    """Deterministic time source; advance it between inserts."""

    def __init__(self, start=datetime.datetime(2024, 3, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **delta):
        self.now += datetime.timedelta(**delta)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    """A request store on a fresh database."""
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(Base, engine)
    yield RequestStore(make_session_factory(engine), clock=clock)
    engine.dispose()


@pytest.fixture
def client(tmp_path, clock):
    """
    Test client over a temporary database.
    Startup seeds the demo staff (HOSP001) and patients (Karan S., Ria V., Manish R.).
    """
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'api.db'}", jwt_secret="jeevrakshak-test-secret-0123456789abcdef")
    app = create_app(settings, clock=clock)
    with TestClient(app) as c:
        yield c
    app.state.engine.dispose()


def login(client, account_id, password, role):
    res = client.post("/api/auth/login", json={"id": account_id, "password": password, "role": role})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def staff_headers(client):
    return login(client, "HOSP001", "staff123", "staff")


@pytest.fixture
def patient_headers(client):
    return login(client, "Karan S.", "patient123", "patient")
