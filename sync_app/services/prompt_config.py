"""Loading of the YAML prompt configuration."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


@lru_cache(maxsize=8)
def load_prompt_config(path: Path) -> dict[str, Any]:
    """Read and cache the prompt configuration at ``path``."""
    with Path(path).open("r", encoding="utf-8") as fh:
        config = yaml.safe_load(fh) or {}
    for section in ("insights", "workout_plan"):
        if section not in config:
            raise ValueError(f"Prompt config {path} is missing the '{section}' section")
    return config
