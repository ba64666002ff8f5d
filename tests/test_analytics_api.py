"""Integration tests for analytics, insights and CSV export endpoints."""
from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from sync_app.exceptions import UpstreamServiceError
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.insight_client import InsightClient


@pytest.fixture
def seeded(db_session, health_records_fixture):
    store = HealthRecordStore(db_session)
    for index, record in enumerate(health_records_fixture):
        table = "health_data" if index < 2 else "new_health_data"
        store.add_record(table, {**record, "date": date.fromisoformat(record["date"])})
    db_session.commit()
    return health_records_fixture


def test_trends_report_cohort_averages(test_client: TestClient, seeded):
    response = test_client.get("/api/analytics/trends")
    assert response.status_code == 200
    data = response.json()

    assert [r["date"] for r in data["records"]] == [r["date"] for r in seeded]
    assert all(isinstance(r["readiness_score"], float) for r in data["records"])
    assert data["sync_start_date"] == "2025-01-03"
    assert data["split_index"] == 2
    assert data["average_readiness_before"] == 55.0
    assert data["average_readiness_after"] == 80.0


def test_trends_empty_database(test_client: TestClient):
    data = test_client.get("/api/analytics/trends").json()
    assert data["records"] == []
    assert data["sync_start_date"] is None
    assert data["average_readiness_before"] == 0.0


def test_export_csv_download(test_client: TestClient, seeded):
    response = test_client.get("/api/analytics/export.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="health_data.csv"' in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0] == "Date,Period Level,Readiness Score,Sleep Score"
    assert lines[1] == "2025-01-01,3,50,62"
    assert len(lines) == 5


@pytest.mark.parametrize("body", [{}, {"data": "records"}, {"data": [1, 2]}, ["not", "an", "object"]])
def test_insights_reject_invalid_data(test_client: TestClient, body):
    response = test_client.post("/api/analytics/insights", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "No valid data array"}


def test_insights_without_credentials(test_client: TestClient, health_records_fixture):
    response = test_client.post("/api/analytics/insights", json={"data": health_records_fixture})
    assert response.status_code == 500
    assert response.json() == {"error": "Missing Perplexity credentials"}


def test_insights_success(monkeypatch: pytest.MonkeyPatch, test_client: TestClient, health_records_fixture):
    captured = {}

    async def fake_generate(self, prompt: str, system_prompt: str) -> str:
        captured["prompt"] = prompt
        return "Your readiness rose by 25 points."

    monkeypatch.setattr(InsightClient, "generate_insights", fake_generate)

    response = test_client.post("/api/analytics/insights", json={"data": health_records_fixture})
    assert response.status_code == 200
    assert response.json() == {"insights": "Your readiness rose by 25 points."}
    assert "about 55.0" in captured["prompt"]


def test_insights_upstream_error(monkeypatch: pytest.MonkeyPatch, test_client: TestClient):
    async def failing(self, prompt: str, system_prompt: str) -> str:
        raise UpstreamServiceError("Perplexity API error", detail='{"error":"rate limited"}')

    monkeypatch.setattr(InsightClient, "generate_insights", failing)

    response = test_client.post("/api/analytics/insights", json={"data": []})
    assert response.status_code == 500
    assert response.json() == {"error": "Perplexity API error", "detail": '{"error":"rate limited"}'}


def test_trends_averages_round_ties_up(test_client: TestClient, db_session):
    store = HealthRecordStore(db_session)
    for day, score in enumerate((60, 60, 50, 50, 50, 51), start=1):
        store.add_record(
            "health_data",
            {"date": date(2025, 1, day), "period_level": 1, "readiness_score": score, "sleep_score": 70},
        )
    db_session.commit()

    data = test_client.get("/api/analytics/trends").json()
    assert data["average_readiness_after"] == 50.3
