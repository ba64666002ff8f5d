"""CSV export of health records."""
from __future__ import annotations

import csv
import io
from typing import Any, Mapping, Sequence

from sync_app.services.formatting import format_value


CSV_HEADER = ["Date", "Period Level", "Readiness Score", "Sleep Score"]
CSV_FIELDS = ["date", "period_level", "readiness_score", "sleep_score"]
CSV_FILENAME = "health_data.csv"


def export_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Header row plus one row per record, ``\\n``-separated, no trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow([format_value(record.get(name), missing="") for name in CSV_FIELDS])
    return buffer.getvalue().rstrip("\n")
