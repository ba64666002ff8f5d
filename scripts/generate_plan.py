"""Generate a 7-day workout plan from stored health data."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from sync_app.database import SessionLocal, run_migrations
from sync_app.exceptions import SyncAppError
from sync_app.logging_config import configure_logging
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.workout_planner import WorkoutPlanRequester, format_instructions


logger = logging.getLogger("scripts.generate_plan")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate and store a workout plan with Gemini")
    parser.add_argument(
        "--instructions",
        action="store_true",
        help="Print narration lines instead of the plan JSON",
    )
    return parser.parse_args(argv)


async def run(show_instructions: bool = False) -> int:
    db = SessionLocal()
    try:
        store = HealthRecordStore(db)
        records = store.list_records()
        if not records:
            logger.warning("⚠️  No health data available; the plan will not be grounded")
        result = await WorkoutPlanRequester().generate_plan(records, store=store)
        db.commit()
    except SyncAppError as e:
        db.rollback()
        logger.error("❌ Plan generation failed: %s", e)
        return 1
    finally:
        db.close()

    if not result.ok:
        logger.error("❌ %s", result.error)
        return 1

    if show_instructions:
        print("\n\n".join(format_instructions(result.plan)))
    else:
        print(json.dumps(result.plan.model_dump(), indent=2))
    logger.info("✅ Stored plan with %d day(s)", len(result.plan.days))
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()
    run_migrations()
    sys.exit(asyncio.run(run(show_instructions=args.instructions)))


if __name__ == "__main__":
    main()
