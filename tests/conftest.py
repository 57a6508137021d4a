import os

# Settings refuse to load without a database URL; tests swap in their own engine below.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from celpip_api.core.config import settings
from celpip_api.core.database import create_db_engine, get_session
from celpip_api.main import app
from celpip_api.models import models  # noqa: F401


@pytest.fixture
def engine(tmp_path):
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    SQLModel.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def client(engine, monkeypatch):
    def override_get_session():
        with Session(engine) as db_session:
            yield db_session

    # Collaborators stay offline unless a test configures them
    monkeypatch.setattr(settings, "google_gemini_api_key", "")
    # Keep signup/login fast
    monkeypatch.setattr(settings, "password_hash_iterations", 1000)

    app.dependency_overrides[get_session] = override_get_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def api_prefix():
    return settings.api_v1_prefix


def make_set(set_id="set-1", title="Demo", sections=None, **extra):
    """Build a practice set payload in the camelCase wire format."""
    payload = {"id": set_id, "title": title, "sections": sections or []}
    payload.update(extra)
    return payload


def mcq(question_id, text="2+2?", options=("3", "4"), correct="4", weight=1):
    return {
        "id": question_id,
        "text": text,
        "type": "MCQ",
        "options": list(options),
        "correctAnswer": correct,
        "weight": weight,
    }
