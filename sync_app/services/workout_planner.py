"""Cycle-synced 7-day workout plans from the Gemini generative-language API."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

import httpx
from pydantic import ValidationError

from sync_app.config import Settings, get_settings
from sync_app.exceptions import MissingCredentialsError, StoreError, UpstreamServiceError
from sync_app.models.schemas import WorkoutPlan
from sync_app.services.formatting import format_value
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.http import post_once
from sync_app.services.prompt_config import load_prompt_config


logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```json|```")
EMPTY_RESPONSE_TEXT = "{}"


@dataclass
class PlanParseResult:
    """Typed outcome of parsing generated plan text."""

    plan: WorkoutPlan = field(default_factory=WorkoutPlan)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> "PlanParseResult":
        return cls(plan=WorkoutPlan(), error=error)


def strip_code_fences(raw: str) -> str:
    """Drop every ```json / ``` marker and surrounding whitespace."""
    return _FENCE_PATTERN.sub("", raw).strip()


def parse_workout_plan(raw: str) -> PlanParseResult:
    """
    Strip fences, parse JSON and validate the plan shape.

    Never raises. The number of days is not checked; a missing ``days`` key
    gives an empty plan without an error.
    """
    text = strip_code_fences(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        logger.warning("Workout plan is not valid JSON: %s", err)
        return PlanParseResult.failed(f"Invalid JSON in workout plan: {err}")

    if not isinstance(data, dict):
        logger.warning("Workout plan JSON is a %s, expected an object", type(data).__name__)
        return PlanParseResult.failed("Workout plan must be a JSON object")

    if data.get("days") is None:
        data = {**data, "days": []}

    try:
        plan = WorkoutPlan.model_validate(data)
    except ValidationError as err:
        logger.warning("Workout plan failed validation: %s", err)
        return PlanParseResult.failed(f"Workout plan has an unexpected shape: {err.error_count()} error(s)")

    if len(plan.days) != 7:
        logger.info("Workout plan has %d days (7 requested)", len(plan.days))
    return PlanParseResult(plan=plan)


def build_workout_prompt(records: Sequence[Mapping[str, Any]], prompt_config_path: Path) -> str:
    """Embed the full history and cite the first record in the example notes."""
    template = load_prompt_config(prompt_config_path)["workout_plan"]["template"]
    first = records[0] if records else {}
    return template.format(
        history=json.dumps(list(records), indent=2, default=str),
        first_date=format_value(first.get("date")),
        first_period_level=format_value(first.get("period_level")),
        first_readiness_score=format_value(first.get("readiness_score")),
    )


def format_instructions(plan: WorkoutPlan) -> list[str]:
    """One narration line per day: heading, notes, then the workout list."""
    instructions = []
    for day in plan.days:
        workouts = ", ".join(f"{w.name} ({w.duration})" for w in day.workouts)
        instructions.append(f"🗓️ {day.day}: {day.focus}\n💡 {day.notes}\n🏋️ {workouts}")
    return instructions


class WorkoutPlanRequester:
    """Requests, parses and stores workout plans."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def request_plan_text(self, records: Sequence[Mapping[str, Any]]) -> str:
        """Send the plan prompt and return the raw generated text."""
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise MissingCredentialsError("Missing Gemini credentials")

        prompt = build_workout_prompt(records, self.settings.prompt_config_path)
        url = f"{self.settings.gemini_base_url}/{self.settings.gemini_model}:generateContent"
        response = await post_once(
            url,
            service="Gemini",
            timeout=self.settings.http_timeout_seconds,
            http_client=self._http_client,
            json={"contents": [{"parts": [{"text": prompt}]}]},
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
        )
        try:
            data = response.json()
        except ValueError as err:
            raise UpstreamServiceError("Gemini returned a non-JSON body", detail=response.text) from err
        return self.extract_text(data)

    @staticmethod
    def extract_text(data: Any) -> str:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return EMPTY_RESPONSE_TEXT
        return text if isinstance(text, str) and text else EMPTY_RESPONSE_TEXT

    async def generate_plan(
        self,
        records: Sequence[Mapping[str, Any]],
        store: HealthRecordStore | None = None,
    ) -> PlanParseResult:
        """
        Generate a plan from the record history and append it to the plan log.

        Parse and store failures are logged and returned as an empty plan with
        an error. Missing credentials and upstream failures propagate.
        """
        logger.info("Requesting workout plan from %d records", len(records))
        raw_text = await self.request_plan_text(records)
        result = parse_workout_plan(raw_text)
        if not result.ok:
            logger.error("Error parsing workout plan from Gemini: %s", result.error)
            return result

        if store is not None:
            try:
                store.save_plan(result.plan.model_dump(), generated_at=datetime.utcnow())
            except StoreError as err:
                logger.error("Error writing workout plan to the store: %s", err)
                return PlanParseResult.failed(err.message)

        logger.info("Workout plan ready | days=%d", len(result.plan.days))
        return result
