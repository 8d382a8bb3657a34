"""
Output artifacts for the chart front-end.

- daily.csv: date,total_hours (empty cell = no data)
- weekly.csv: week_start,total_hours,days_with_data
- weekly_groups.csv: week_start plus one column per group
- summary.json: week-to-date totals and run metadata
- quality_report.json: rows skipped by the loader
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Sequence

import pandas as pd

from activity_buckets.models import DailyBucket, WeeklyBucket, WeeklyGroupTotals


def ensure_dir(out_dir: Path) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def daily_frame(daily: Sequence[DailyBucket]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "date": [b.date.isoformat() for b in daily],
            "total_hours": pd.array([b.total_hours for b in daily], dtype="Float64"),
        }
    )


def weekly_frame(weekly: Sequence[WeeklyBucket]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "week_start": [w.week_start.isoformat() for w in weekly],
            "total_hours": [w.total_hours for w in weekly],
            "days_with_data": [w.days_with_data for w in weekly],
        }
    )


def group_matrix_frame(matrix: Sequence[WeeklyGroupTotals], group_names: List[str]) -> pd.DataFrame:
    """Wide frame: one row per week, one column per group (in group order)."""
    rows = []
    for row in matrix:
        entry = {"week_start": row.week_start.isoformat()}
        entry.update({name: row.totals.get(name, 0.0) for name in group_names})
        rows.append(entry)
    return pd.DataFrame(rows, columns=["week_start"] + list(group_names))


def save_daily(daily: Sequence[DailyBucket], out_dir: Path) -> Path:
    out_path = ensure_dir(out_dir) / "daily.csv"
    daily_frame(daily).to_csv(out_path, index=False)
    return out_path


def save_weekly(weekly: Sequence[WeeklyBucket], out_dir: Path) -> Path:
    out_path = ensure_dir(out_dir) / "weekly.csv"
    weekly_frame(weekly).to_csv(out_path, index=False)
    return out_path


def save_group_matrix(matrix: Sequence[WeeklyGroupTotals], group_names: List[str], out_dir: Path) -> Path:
    out_path = ensure_dir(out_dir) / "weekly_groups.csv"
    group_matrix_frame(matrix, group_names).to_csv(out_path, index=False)
    return out_path


def save_summary(summary: dict, out_dir: Path) -> Path:
    out_path = ensure_dir(out_dir) / "summary.json"
    out_path.write_text(json.dumps(summary, indent=2, default=str), encoding="utf-8")
    return out_path


def save_quality_report(quality: dict, out_dir: Path) -> Path:
    out_path = ensure_dir(out_dir) / "quality_report.json"
    out_path.write_text(json.dumps(quality, indent=2), encoding="utf-8")
    return out_path
