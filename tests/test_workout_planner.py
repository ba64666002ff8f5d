"""Tests for workout plan prompting, parsing and storage."""
from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from sync_app.config import get_settings
from sync_app.exceptions import MissingCredentialsError, StoreError, UpstreamServiceError
from sync_app.models.database_models import GeminiOutput
from sync_app.models.schemas import WorkoutDayPlan, WorkoutItem, WorkoutPlan
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.workout_planner import (
    WorkoutPlanRequester,
    build_workout_prompt,
    format_instructions,
    parse_workout_plan,
    strip_code_fences,
)


PROMPTS = get_settings().prompt_config_path


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"days":[]}\n```') == '{"days":[]}'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fences('```\n{}\n```') == "{}"


def test_fenced_empty_plan_parses():
    result = parse_workout_plan('```json\n{"days":[]}\n```')
    assert result.ok
    assert result.plan.days == []


def test_invalid_json_yields_empty_plan_and_error():
    result = parse_workout_plan("not json")
    assert not result.ok
    assert result.plan.days == []
    assert "Invalid JSON" in result.error


def test_missing_days_key_is_empty_plan_without_error():
    result = parse_workout_plan('{"plan": "rest"}')
    assert result.ok
    assert result.plan.days == []


@pytest.mark.parametrize("raw", ["[1, 2]", "null", '"text"'])
def test_non_object_json_is_reported(raw: str):
    result = parse_workout_plan(raw)
    assert not result.ok
    assert result.plan.days == []


def test_wrong_day_shape_is_reported():
    result = parse_workout_plan('{"days": [{"day": "Monday", "workouts": "squats"}]}')
    assert not result.ok
    assert result.plan.days == []


def test_day_count_is_not_enforced():
    raw = json.dumps({"days": [{"day": "Monday", "focus": "Rest", "workouts": [], "notes": ""}]})
    result = parse_workout_plan(raw)
    assert result.ok
    assert len(result.plan.days) == 1


def test_numbers_accepted_where_text_expected():
    raw = '{"days": [{"day": "Monday", "workouts": [{"name": "Bike", "duration": 20}]}]}'
    result = parse_workout_plan(raw)
    assert result.plan.days[0].workouts[0].duration == "20"
    assert result.plan.days[0].focus == ""


def test_null_notes_keep_the_plan():
    raw = json.dumps(
        {"days": [{"day": "Monday", "focus": "Rest", "workouts": [{"name": "Walk", "duration": "20 min"}], "notes": None}]}
    )
    result = parse_workout_plan(raw)

    assert result.ok
    assert result.plan.days[0].notes == ""
    assert result.plan.days[0].workouts[0].name == "Walk"


def test_null_workouts_become_empty_list():
    result = parse_workout_plan('{"days": [{"day": "Sunday", "focus": "Recovery", "workouts": null, "notes": "Sleep in."}]}')

    assert result.ok
    assert result.plan.days[0].workouts == []
    assert format_instructions(result.plan) == ["🗓️ Sunday: Recovery\n💡 Sleep in.\n🏋️ "]


def test_null_duration_becomes_blank():
    result = parse_workout_plan('{"days": [{"day": "Monday", "workouts": [{"name": "Yoga", "duration": null}]}]}')

    assert result.ok
    assert result.plan.days[0].workouts[0].duration == ""


def test_non_object_day_entry_is_reported():
    result = parse_workout_plan('{"days": ["Monday: rest"]}')
    assert not result.ok
    assert result.plan.days == []


def test_workout_prompt_cites_first_record(health_records_fixture):
    prompt = build_workout_prompt(health_records_fixture, PROMPTS)

    assert "Since the user's period level on 2025-01-01 was 3" in prompt
    assert "Due to a readiness score of 50 on 2025-01-01" in prompt
    assert '"symptoms": "Cramps, fatigue"' in prompt
    assert '"days": [' in prompt
    assert "{{" not in prompt


def test_workout_prompt_without_records():
    prompt = build_workout_prompt([], PROMPTS)
    assert "period level on Unknown was Unknown" in prompt


def test_format_instructions():
    plan = WorkoutPlan(
        days=[
            WorkoutDayPlan(
                day="Monday",
                focus="Strength",
                notes="Go easy.",
                workouts=[WorkoutItem(name="Squats", duration="10 min"), WorkoutItem(name="Plank", duration="5 min")],
            )
        ]
    )
    assert format_instructions(plan) == ["🗓️ Monday: Strength\n💡 Go easy.\n🏋️ Squats (10 min), Plank (5 min)"]


def _gemini_client(payload=None, status: int = 200, seen: dict | None = None) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
        return httpx.Response(status, json=payload) if status < 400 else httpx.Response(status, text="quota exceeded")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_generate_plan_parses_and_stores(configured_settings, gemini_fixture, health_records_fixture, db_session):
    seen: dict = {}
    store = HealthRecordStore(db_session)
    async with _gemini_client(gemini_fixture, seen=seen) as http_client:
        requester = WorkoutPlanRequester(settings=configured_settings, http_client=http_client)
        result = await requester.generate_plan(health_records_fixture, store=store)
    db_session.commit()

    assert result.ok
    assert [day.day for day in result.plan.days][:2] == ["Monday", "Tuesday"]
    assert len(result.plan.days) == 7
    assert seen["url"].path.endswith("/gemini-pro:generateContent")
    assert seen["url"].params["key"] == "test-gemini-key"
    assert "7-day workout plan" in seen["body"]["contents"][0]["parts"][0]["text"]

    stored = db_session.query(GeminiOutput).all()
    assert len(stored) == 1
    assert stored[0].workout_plan["days"][0]["focus"] == "Strength Training"


@pytest.mark.asyncio
async def test_malformed_plan_is_not_stored(configured_settings, db_session):
    payload = {"candidates": [{"content": {"parts": [{"text": "Here is your plan: Monday squats"}]}}]}
    async with _gemini_client(payload) as http_client:
        requester = WorkoutPlanRequester(settings=configured_settings, http_client=http_client)
        result = await requester.generate_plan([], store=HealthRecordStore(db_session))

    assert result.error is not None
    assert result.plan.days == []
    assert db_session.query(GeminiOutput).count() == 0


@pytest.mark.asyncio
async def test_empty_candidates_default_to_empty_plan(configured_settings):
    async with _gemini_client({"candidates": []}) as http_client:
        requester = WorkoutPlanRequester(settings=configured_settings, http_client=http_client)
        result = await requester.generate_plan([])

    assert result.ok
    assert result.plan.days == []


@pytest.mark.asyncio
async def test_store_failure_resets_plan(configured_settings, gemini_fixture):
    class FailingStore:
        def save_plan(self, workout_plan, generated_at=None):
            raise StoreError("Error saving workout plan.")

    async with _gemini_client(gemini_fixture) as http_client:
        requester = WorkoutPlanRequester(settings=configured_settings, http_client=http_client)
        result = await requester.generate_plan([], store=FailingStore())

    assert result.error == "Error saving workout plan."
    assert result.plan.days == []


@pytest.mark.asyncio
async def test_upstream_failure_propagates(configured_settings):
    async with _gemini_client(status=429) as http_client:
        requester = WorkoutPlanRequester(settings=configured_settings, http_client=http_client)
        with pytest.raises(UpstreamServiceError) as excinfo:
            await requester.generate_plan([])
    assert excinfo.value.detail == "quota exceeded"


@pytest.mark.asyncio
async def test_missing_gemini_key(configured_settings):
    settings = configured_settings.model_copy(update={"gemini_api_key": None})
    with pytest.raises(MissingCredentialsError):
        await WorkoutPlanRequester(settings=settings).generate_plan([{"date": date(2025, 1, 1)}])
