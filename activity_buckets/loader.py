"""
Loading time-logger CSV exports.

Expected columns: "Activity type", "From", "To", "Duration" and optionally
"Comment". Rows that cannot become a valid ActivityRecord are skipped and
listed in a quality report, so the aggregator only ever sees clean records.

Rules implemented:
- Empty "To" means the activity is still running / incomplete -> skipped.
- "From"/"To" that do not parse as timestamps -> skipped.
- "To" before "From" -> skipped.
- "Duration" is HH:MM; when malformed, fall back to To - From and note it.
- UTC offsets are dropped; times stay on the clock they were logged in.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from activity_buckets.models import ActivityRecord


COL_ACTIVITY = "Activity type"
COL_FROM = "From"
COL_TO = "To"
COL_DURATION = "Duration"
COL_COMMENT = "Comment"

REQUIRED_COLUMNS = [COL_ACTIVITY, COL_FROM, COL_TO]

_DURATION_RE = re.compile(r"^(?P<hours>\d+):(?P<minutes>\d{1,2})$")


def parse_duration(text: str) -> float:
    """Parse 'HH:MM' (e.g. '01:14') into fractional hours."""
    m = _DURATION_RE.match(str(text).strip())
    if not m:
        raise ValueError(f"Duration must be HH:MM, got {text!r}")
    minutes = int(m.group("minutes"))
    if minutes >= 60:
        raise ValueError(f"Duration minutes must be below 60, got {text!r}")
    return int(m.group("hours")) + minutes / 60.0


def empty_quality_report() -> dict:
    return {
        "invalid_rows": [],
        "duration_fallbacks": [],
    }


def _cell(row: pd.Series, column: str) -> str:
    """Cell text, '' for absent columns and missing (NaN/None) values."""
    value = row.get(column, "")
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a From/To cell into a naive wall-clock datetime, or None.

    Offsets are dropped rather than converted: '2021-03-28 09:00+02:00' is
    09:00 on the 28th, the day as shown on the logger's own clock. Exports
    that cross a daylight-saving change therefore parse row by row.
    """
    if not text:
        return None
    ts = pd.to_datetime(text, errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def records_from_frame(df: pd.DataFrame) -> Tuple[List[ActivityRecord], dict]:
    """Convert a raw export frame into records. Missing cells count as empty."""
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(
            f"CSV is missing required column(s): {', '.join(missing)}. "
            f"Required: {', '.join(REQUIRED_COLUMNS)}"
        )

    quality = empty_quality_report()
    records: List[ActivityRecord] = []

    for pos, (_, row) in enumerate(df.iterrows()):
        # Header is line 1
        line_no = pos + 2
        activity = _cell(row, COL_ACTIVITY)
        from_raw = _cell(row, COL_FROM)
        to_raw = _cell(row, COL_TO)

        def skip(reason: str):
            quality["invalid_rows"].append(
                {"line": line_no, "activity": activity, "from": from_raw, "to": to_raw, "reason": reason}
            )

        if not to_raw:
            skip("Empty 'To' (incomplete activity)")
            continue
        if not activity:
            skip("Missing activity type")
            continue
        start, end = parse_timestamp(from_raw), parse_timestamp(to_raw)
        if start is None or end is None:
            skip("Unparseable 'From' or 'To' timestamp")
            continue
        if end < start:
            skip("'To' is before 'From'")
            continue

        logged_hours: Optional[float] = None
        duration_raw = _cell(row, COL_DURATION)
        if duration_raw:
            try:
                logged_hours = parse_duration(duration_raw)
            except ValueError as e:
                quality["duration_fallbacks"].append({"line": line_no, "duration": duration_raw, "reason": str(e)})

        records.append(
            ActivityRecord(
                category=activity,
                start=start,
                end=end,
                logged_hours=logged_hours,
                comment=_cell(row, COL_COMMENT),
            )
        )

    return records, quality


def load_records(filepath) -> Tuple[List[ActivityRecord], dict]:
    """
    Read a time-logger CSV export. Returns (records, quality_report).

    Raises FileNotFoundError for a missing file and KeyError when required
    columns are absent.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Activity CSV not found: {path}")

    # Keep every cell as text; empty cells stay "" rather than NaN.
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True, encoding="utf-8-sig")
    df.columns = [str(c).strip() for c in df.columns]
    return records_from_frame(df)
