"""
Calendar bucketing of activity records.

Turns an unordered list of ActivityRecords into:
- a gap-free daily series (one DailyBucket per day, None where nothing ended)
- Monday-aligned weekly totals over that series
- per-group record lists and a week x group matrix for stacked charts

Every record is attributed to the day its *end* falls on, so a night of
sleep from 23:00 to 07:00 counts for the morning it ends.

Weeks are numbered by whole weeks elapsed since the first day's Monday, not
by ISO week number, so a range crossing New Year stays continuous.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from activity_buckets.errors import EmptyInputError, UnorderedInputError
from activity_buckets.models import (
    ActivityRecord,
    CategoryGroup,
    DailyBucket,
    WeeklyBucket,
    WeeklyGroupTotals,
)


Groups = Union[Sequence[CategoryGroup], Mapping[str, Iterable[str]]]


# ---------------------------
# Helpers
# ---------------------------

def week_start(day: date) -> date:
    """Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def week_index(day: date, origin: date) -> int:
    """Whole weeks between origin's Monday and day's Monday."""
    return (week_start(day) - week_start(origin)).days // 7


def as_groups(groups: Groups) -> List[CategoryGroup]:
    # Plain mappings are accepted as-is; overlap warnings belong to build_groups.
    if isinstance(groups, Mapping):
        for name, members in groups.items():
            if isinstance(members, str):
                raise TypeError(
                    f"Group '{name}' must list its activity types, got a single string {members!r}"
                )
        return [CategoryGroup(name=name, members=frozenset(members)) for name, members in groups.items()]
    return list(groups)


def _require_records(records: Iterable[ActivityRecord]) -> List[ActivityRecord]:
    records = list(records)
    if not records:
        raise EmptyInputError("Cannot bucket zero activity records: no date range")
    return records


def _records_frame(records: List[ActivityRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "category": [r.category for r in records],
            "day": [r.day for r in records],
            "hours": [r.duration_hours for r in records],
        }
    )


def _day_range(first: date, last: date) -> List[date]:
    return list(pd.date_range(pd.Timestamp(first), pd.Timestamp(last), freq="D").date)


# ---------------------------
# Daily / weekly
# ---------------------------

def bucket_by_day(records: Iterable[ActivityRecord]) -> List[DailyBucket]:
    """
    One DailyBucket per calendar day from the first to the last record's end
    day, inclusive and ascending. Days with no records carry None.
    """
    records = _require_records(records)
    df = _records_frame(records)

    totals = df.groupby("day")["hours"].sum()
    totals = totals.reindex(_day_range(df["day"].min(), df["day"].max()))

    return [
        DailyBucket(date=day, total_hours=None if pd.isna(hours) else float(hours))
        for day, hours in totals.items()
    ]


def bucket_by_week(daily: Sequence[DailyBucket]) -> List[WeeklyBucket]:
    """
    Sum ascending daily buckets into Monday-aligned weeks.

    Sentinel days add nothing; a week made only of sentinel days is still
    emitted with 0.0 hours and days_with_data == 0. The last week is emitted
    even when it is incomplete.
    """
    daily = list(daily)
    if not daily:
        raise EmptyInputError("Cannot bucket zero days into weeks")
    for prev, curr in zip(daily, daily[1:]):
        if curr.date <= prev.date:
            raise UnorderedInputError(
                f"Daily buckets must be strictly ascending: {prev.date} followed by {curr.date}"
            )

    origin = daily[0].date
    weeks: List[WeeklyBucket] = []
    current_week = week_index(origin, origin)
    total = 0.0
    with_data = 0

    for bucket in daily:
        idx = week_index(bucket.date, origin)
        if idx > current_week:
            weeks.append(
                WeeklyBucket(
                    week_start=week_start(origin) + timedelta(weeks=current_week),
                    total_hours=total,
                    days_with_data=with_data,
                )
            )
            current_week = idx
            total = 0.0
            with_data = 0
        if bucket.has_data:
            total += bucket.total_hours
            with_data += 1

    weeks.append(
        WeeklyBucket(
            week_start=week_start(origin) + timedelta(weeks=current_week),
            total_hours=total,
            days_with_data=with_data,
        )
    )
    return weeks


# ---------------------------
# Groups
# ---------------------------

def which_group(category: str, groups: Groups) -> Optional[str]:
    """Name of the first group listing `category`, or None."""
    for group in as_groups(groups):
        if category in group.members:
            return group.name
    return None


def group_records(records: Iterable[ActivityRecord], groups: Groups) -> Dict[str, List[ActivityRecord]]:
    """
    Split records by group, keeping input order inside each group.

    Every group gets a key even when empty. Records whose category is in no
    group are dropped.
    """
    groups = as_groups(groups)
    grouped: Dict[str, List[ActivityRecord]] = {g.name: [] for g in groups}
    for record in records:
        name = which_group(record.category, groups)
        if name is not None:
            grouped[name].append(record)
    return grouped


def weekly_group_matrix(records: Iterable[ActivityRecord], groups: Groups) -> List[WeeklyGroupTotals]:
    """
    Hours per (week, group) over the full date range of *all* records.

    Ungrouped records still stretch the range but add no hours. Missing
    (week, group) cells are 0.0 so stacked bars render with zero height.
    """
    records = _require_records(records)
    groups = as_groups(groups)
    names = [g.name for g in groups]

    df = _records_frame(records)
    first_day, last_day = df["day"].min(), df["day"].max()
    weeks = [
        week_start(first_day) + timedelta(weeks=i)
        for i in range(week_index(last_day, first_day) + 1)
    ]

    df["group"] = [which_group(cat, groups) for cat in df["category"]]
    df = df[df["group"].notna()].copy()
    df["week_start"] = [week_start(d) for d in df["day"]]

    if df.empty:
        pivot = pd.DataFrame(0.0, index=weeks, columns=names)
    else:
        pivot = df.pivot_table(index="week_start", columns="group", values="hours", aggfunc="sum")
        pivot = pivot.reindex(index=weeks, columns=names).fillna(0.0)

    return [
        WeeklyGroupTotals(
            week_start=week,
            totals={name: float(pivot.at[week, name]) for name in names},
        )
        for week in weeks
    ]
