#!/usr/bin/env python3
"""
Activity bucketing pipeline.

Reads a time-logger CSV export and writes, under out/:
- daily.csv, weekly.csv: hours per day / Monday-aligned week
- weekly_groups.csv: hours per week per category group (stacked charts)
- summary.json: totals, this week so far, per-day sleep deviation
- quality_report.json: rows the loader skipped and why

Non-destructive: the input CSV is only read.
"""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from activity_buckets.aggregate import (
    bucket_by_day,
    bucket_by_week,
    weekly_group_matrix,
)
from activity_buckets.errors import EmptyInputError
from activity_buckets.groups import DEFAULT_GROUPS, build_groups, load_groups
from activity_buckets.loader import load_records
from activity_buckets.models import ActivityRecord, CategoryGroup
from activity_buckets.report import (
    save_daily,
    save_group_matrix,
    save_quality_report,
    save_summary,
    save_weekly,
)
from activity_buckets.summary import (
    deviation_from_average,
    filter_activity,
    format_duration,
    week_to_date,
)


# ---------------------------
# Config and constants
# ---------------------------

ROOT = Path.cwd()
DATA_FILE = ROOT / "data" / "report.csv"
OUT_DIR = ROOT / "out"

# Activity type used for the per-day deviation view
SLEEP_ACTIVITY = "Sleep"


def build_summary(
    records: List[ActivityRecord],
    groups: List[CategoryGroup],
    now: datetime,
    sleep_activity: str = SLEEP_ACTIVITY,
) -> dict:
    """Everything the front-end shows next to the charts, as plain JSON."""
    daily = bucket_by_day(records)
    with_data = [b for b in daily if b.has_data]
    total_hours = sum(b.total_hours for b in with_data)

    per_activity, per_group = week_to_date(records, now, groups)

    summary = {
        "generated_at": now.isoformat(),
        "date_range": {"start": daily[0].date.isoformat(), "end": daily[-1].date.isoformat()},
        "total_days": len(daily),
        "days_with_data": len(with_data),
        "total_hours": round(total_hours, 4),
        "week_to_date": {
            "activities": {name: format_duration(h) for name, h in per_activity.items()},
            "groups": {name: format_duration(h) for name, h in per_group.items()},
        },
        "sleep": None,
    }

    sleeps = filter_activity(records, sleep_activity)
    if sleeps:
        sleep_daily = bucket_by_day(sleeps)
        summary["sleep"] = {
            "activity": sleep_activity,
            "daily_hours": {b.date.isoformat(): b.total_hours for b in sleep_daily},
            "deviation_from_average": {
                d.isoformat(): (None if dev is None else round(dev, 4))
                for d, dev in deviation_from_average(sleep_daily)
            },
        }
    return summary


def run(
    data_file: Path,
    out_dir: Path,
    groups: List[CategoryGroup],
    activity: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Load, aggregate and save. Returns {artifact name: path}.

    Loaded records are naive wall-clock times, so an aware `now` is taken as
    local wall-clock time too. Every artifact is computed before the first
    bucket file is written.
    """
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)

    records, quality = load_records(data_file)
    print(f"  Loaded {len(records)} activity record(s) from {data_file}")
    if quality["invalid_rows"]:
        print(f"  Warning: Skipped {len(quality['invalid_rows'])} invalid row(s); see quality_report.json")

    saved = {"quality_report": save_quality_report(quality, out_dir)}

    if activity:
        records = filter_activity(records, activity)
        print(f"  Kept {len(records)} '{activity}' record(s)")

    daily = bucket_by_day(records)
    weekly = bucket_by_week(daily)
    matrix = weekly_group_matrix(records, groups)
    summary = build_summary(records, groups, now)
    print(f"  Bucketed into {len(daily)} day(s), {len(weekly)} week(s)")

    saved["daily"] = save_daily(daily, out_dir)
    saved["weekly"] = save_weekly(weekly, out_dir)
    saved["weekly_groups"] = save_group_matrix(matrix, [g.name for g in groups], out_dir)
    saved["summary"] = save_summary(summary, out_dir)
    return saved


# ---------------------------
# CLI
# ---------------------------

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="activity-buckets",
        description="Bucket time-logger CSV exports into daily, weekly and per-group hour totals.",
        epilog="Example: activity-buckets --data data/report.csv --groups groups.json --out out",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=DATA_FILE,
        help=f"Path to the time-logger CSV export (default: {DATA_FILE})",
    )
    parser.add_argument(
        "--groups",
        type=Path,
        default=None,
        help="JSON file of {group: [activity type, ...]} (default: built-in groups)",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=OUT_DIR,
        help=f"Output directory (default: {OUT_DIR})",
    )
    parser.add_argument(
        "--activity",
        type=str,
        default=None,
        help="Only bucket records of this activity type (e.g. Sleep)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)

    print("\nActivity Buckets")
    print("=" * 70)

    try:
        groups = load_groups(args.groups) if args.groups else build_groups(DEFAULT_GROUPS)
    except FileNotFoundError as e:
        print(f"\nFile Error: {e}\n", flush=True)
        return 1
    except (TypeError, ValueError) as e:
        print(f"\nGroups Config Error: {e}\n", flush=True)
        return 1

    try:
        saved = run(args.data, args.out, groups, activity=args.activity)
    except FileNotFoundError as e:
        print(f"\nFile Error: {e}\n", flush=True)
        return 1
    except KeyError as e:
        print(f"\nData Structure Error: {e}\n", flush=True)
        return 1
    except EmptyInputError:
        print("No activities parsed.")
        return 1
    except ValueError as e:
        print(f"\nData Validation Error: {e}\n", flush=True)
        return 1

    for name, path in saved.items():
        print(f"  {name}: {path}")
    print("=" * 70 + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
