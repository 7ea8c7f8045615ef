# tests/conftest.py
"""Shared fixtures: a throwaway SQLite database per test and an API client bound to it."""

import sys
import os
import tempfile
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Point the app at SQLite before anything imports app.config
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'vigilance_test.db')}")
os.environ.setdefault("API_KEY", "")

import pytest
from sqlalchemy.orm import sessionmaker
from app.database import build_engine, create_tables, get_db
from app.services.identity_service import actor_cache, create_actor
from app.services import alert_service


@pytest.fixture(autouse=True)
def clear_actor_cache():
    actor_cache.clear()
    yield
    actor_cache.clear()


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'alerts.db'}")
    create_tables(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def people(db):
    """U1 authors alerts, U2–U5 are neighbours, ADMIN moderates."""
    ids = {}
    for actor_id in ("U1", "U2", "U3", "U4", "U5"):
        ids[actor_id] = create_actor(db, name=f"User {actor_id[1:]}", actor_id=actor_id).id
    ids["ADMIN"] = create_actor(db, name="Moderator", is_admin=True, actor_id="ADMIN").id
    return ids


def make_fields(**overrides):
    fields = {
        "reason": "Theft",
        "description": "Bag snatched near the market entrance",
        "location": "Analakely market",
        "urgency": "high",
        "latitude": -18.9052,
        "longitude": 47.5255,
        "media": [],
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def new_alert(db, people):
    """Factory: new_alert(author="U1", **field_overrides) -> Alert."""
    def _create(author="U1", **overrides):
        return alert_service.create_alert(db, people[author], make_fields(**overrides))
    return _create


@pytest.fixture
def alert(new_alert):
    return new_alert()


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from app.main import app

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()
