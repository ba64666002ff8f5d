"""Build the before/after insight prompt for the chat-completion service."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from sync_app.services.cohort import SYNC_START_INDEX, split_cohorts, split_start_date
from sync_app.services.formatting import format_value, ordinal, round_half_up
from sync_app.services.prompt_config import load_prompt_config


def format_record_line(record: Mapping[str, Any]) -> str:
    return (
        f"Date: {format_value(record.get('date'))}, "
        f"Period Level: {format_value(record.get('period_level'))}, "
        f"Readiness: {format_value(record.get('readiness_score'))}, "
        f"Sleep: {format_value(record.get('sleep_score'))}"
    )


def build_insight_prompt(
    records: Sequence[Mapping[str, Any]],
    prompt_config_path: Path,
    split_index: int = SYNC_START_INDEX,
) -> str:
    """
    Summarise the record history and the readiness change around the split.

    Args:
        records: Health records ordered by date ascending
        prompt_config_path: YAML file holding the fixed prompt text
        split_index: Position of the first record after the user started using Sync

    Returns:
        Prompt text; identical inputs always give identical output
    """
    text = load_prompt_config(prompt_config_path)["insights"]

    start_date = split_start_date(records, split_index)
    cohorts = split_cohorts(records, split_index)
    avg_before, avg_after = cohorts.averages("readiness_score")

    sections = [
        text["opening"].format(
            sync_start_ordinal=ordinal(split_index + 1),
            sync_start_date=format_value(start_date),
        ),
        text["summary_heading"],
        "\n".join(format_record_line(record) for record in records),
        "\n".join(
            [
                text["before_average"].format(avg_before=round_half_up(avg_before)),
                text["after_average"].format(avg_after=round_half_up(avg_after)),
            ]
        ),
        text["instructions"],
    ]
    return "\n\n".join(section.strip() for section in sections if section.strip())


def insight_system_prompt(prompt_config_path: Path) -> str:
    return load_prompt_config(prompt_config_path)["insights"]["system"]
