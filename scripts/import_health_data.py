"""Manual import of health records from a CSV or JSON file."""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sync_app.database import SessionLocal, run_migrations
from sync_app.exceptions import StoreError
from sync_app.logging_config import configure_logging
from sync_app.models.database_models import RECORD_TABLES
from sync_app.models.schemas import HealthRecordBase
from sync_app.services.health_store import HealthRecordStore


logger = logging.getLogger("scripts.import_health_data")

# Column titles used by the CSV export, mapped to record fields.
EXPORT_COLUMNS = {
    "Date": "date",
    "Period Level": "period_level",
    "Readiness Score": "readiness_score",
    "Sleep Score": "sleep_score",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import health records into the Sync database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Re-import a CSV produced by the analytics export
  python scripts/import_health_data.py health_data.csv

  # Load JSON records into the post-Sync table
  python scripts/import_health_data.py records.json --table new_health_data
        """
    )
    parser.add_argument("path", type=Path, help="CSV or JSON file with records")
    parser.add_argument(
        "--table",
        choices=sorted(RECORD_TABLES),
        default="health_data",
        help="Destination table (default: health_data)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing anything",
    )
    return parser.parse_args(argv)


def load_rows(path: Path) -> list[dict[str, Any]]:
    """Read raw rows; CSV headers may be export titles or field names."""
    if path.suffix.lower() == ".json":
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if isinstance(data, dict):
            data = data.get("data", [])
        if not isinstance(data, list):
            raise ValueError(f"{path} does not contain a list of records")
        return [row for row in data if isinstance(row, dict)]

    with path.open("r", encoding="utf-8", newline="") as fh:
        return [
            {EXPORT_COLUMNS.get(key, key): value for key, value in row.items() if key}
            for row in csv.DictReader(fh)
        ]


def to_record_values(row: dict[str, Any]) -> dict[str, Any]:
    """Validate a raw row; blank optional cells are dropped."""
    cleaned = {key: value for key, value in row.items() if value not in ("", None) and key != "id"}
    return HealthRecordBase.model_validate(cleaned).model_dump()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()

    try:
        rows = load_rows(args.path)
    except (OSError, ValueError) as e:
        logger.error("❌ Could not read %s: %s", args.path, e)
        sys.exit(1)

    records: list[dict[str, Any]] = []
    for line_number, row in enumerate(rows, start=1):
        try:
            records.append(to_record_values(row))
        except ValidationError as e:
            logger.error("❌ Row %d is invalid: %s", line_number, e)
            sys.exit(1)

    logger.info("📄 %d valid record(s) in %s", len(records), args.path)
    if args.dry_run:
        return

    run_migrations()
    db = SessionLocal()
    try:
        store = HealthRecordStore(db)
        for values in records:
            store.add_record(args.table, values)
        db.commit()
    except StoreError as e:
        logger.error("❌ Import failed: %s", e)
        sys.exit(1)
    finally:
        db.close()

    logger.info("✅ Imported %d record(s) into %s", len(records), args.table)


if __name__ == "__main__":
    main()
