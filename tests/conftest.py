"""Shared test fixtures.

Every app-level test runs twice: once on the in-memory store and once on the
SQL store (in-memory SQLite). Time is driven by ``FakeClock`` so lockout
expiry can be tested without sleeping.
"""

from datetime import datetime, timedelta
from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from config import TestConfig
from models import db
from security.account_guard import AccountGuard
from security.session import SessionManager
from storage.providers.memory import MemoryStore


class DatabaseTestConfig(TestConfig):
    STORAGE_BACKEND = "database"


class FakeClock:
    def __init__(self, now: datetime = None) -> None:
        self.now = now or datetime(2026, 1, 15, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "database"])
def app(request, clock: FakeClock) -> Generator[Flask, None, None]:
    config = TestConfig if request.param == "memory" else DatabaseTestConfig
    app = create_app(config, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture()
def guard(app: Flask) -> AccountGuard:
    """The app's guard, bound to whichever store the app was built with."""
    return app.extensions["account_guard"]


@pytest.fixture()
def memory_guard(clock: FakeClock) -> AccountGuard:
    """A guard with no Flask app at all."""
    store = MemoryStore()
    sessions = SessionManager(store, lifetime_seconds=3600, clock=clock)
    return AccountGuard(store, sessions, clock=clock)


# ─── Request helpers ─────────────────────────────────────────────────────────

ALICE = {
    "email": "alice@example.com",
    "username": "alice",
    "password": "CorrectPass1",
    "firstName": "Alice",
    "lastName": "Liddell",
    "phone": "555-0100",
}


def register(client: FlaskClient, **overrides):
    return client.post("/api/register", json={**ALICE, **overrides})


def login(client: FlaskClient, email: str = ALICE["email"], password: str = ALICE["password"]):
    return client.post("/api/login", json={"email": email, "password": password})
