"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

_TMP_DIR = Path(tempfile.mkdtemp(prefix="sync-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["LOG_DIR"] = str(_TMP_DIR / "logs")
for _key in ("PERPLEXITY_API_KEY", "GEMINI_API_KEY", "ELEVENLABS_API_KEY", "ELEVENLABS_VOICE_ID"):
    os.environ[_key] = ""

from sync_app.logging_config import configure_logging

configure_logging()

from sync_app.config import Settings, get_settings
from sync_app.database import Base, SessionLocal, engine
from sync_app.main import app
from sync_app.models import database_models  # noqa: F401

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session", autouse=True)
def _schema() -> Iterator[None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _clean_tables() -> Iterator[None]:
    """Every test starts with empty tables."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="session")
def test_client() -> Iterator[TestClient]:
    """Provide a FastAPI test client sharing one event loop across requests."""

    with TestClient(app) as client:
        yield client


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def configured_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings with every credential present, returned by ``get_settings``."""

    settings = get_settings().model_copy(
        update={
            "perplexity_api_key": "test-perplexity-key",
            "gemini_api_key": "test-gemini-key",
            "elevenlabs_api_key": "test-elevenlabs-key",
            "elevenlabs_voice_id": "voice-123",
        }
    )
    for target in (
        "sync_app.services.insight_client.get_settings",
        "sync_app.services.workout_planner.get_settings",
        "sync_app.services.speech.get_settings",
    ):
        monkeypatch.setattr(target, lambda: settings)
    return settings


@pytest.fixture(scope="session")
def health_records_fixture() -> list[dict[str, Any]]:
    """Return sample health records."""

    with (FIXTURES_DIR / "health_records.json").open("r", encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture(scope="session")
def gemini_fixture() -> dict[str, Any]:
    """Return a Gemini generateContent payload wrapping a fenced 7-day plan."""

    with (FIXTURES_DIR / "gemini_response.json").open("r", encoding="utf-8") as fh:
        return json.load(fh)
