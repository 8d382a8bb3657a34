"""Week-to-date totals, per-activity views and HH:MM formatting."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from activity_buckets.aggregate import Groups, as_groups, week_start
from activity_buckets.models import ActivityRecord, DailyBucket


def format_duration(hours: float) -> str:
    """1.5 -> '01:30'. Minutes are rounded; 59.6 minutes carries into the hour."""
    total_minutes = int(round(hours * 60))
    hh, mm = divmod(total_minutes, 60)
    return f"{hh:02d}:{mm:02d}"


def filter_activity(records: Iterable[ActivityRecord], category: str) -> List[ActivityRecord]:
    return [r for r in records if r.category == category]


def records_between(records: Iterable[ActivityRecord], since: datetime, until: datetime) -> List[ActivityRecord]:
    """Records whose end lies strictly between `since` and `until`."""
    return [r for r in records if since < r.end < until]


def activity_totals(records: Iterable[ActivityRecord]) -> Dict[str, float]:
    """Hours per activity type, in first-seen order."""
    totals: Dict[str, float] = {}
    for record in records:
        totals[record.category] = totals.get(record.category, 0.0) + record.duration_hours
    return totals


def group_totals(totals: Dict[str, float], groups: Groups) -> Dict[str, float]:
    """
    Roll per-activity hours up into groups.

    Every group is reported, 0.0 when empty. Unlike the weekly matrix this
    counts an activity once for *each* group that lists it.
    """
    result = {}
    for group in as_groups(groups):
        result[group.name] = sum((hours for activity, hours in totals.items() if activity in group.members), 0.0)
    return result


def week_to_date(
    records: Iterable[ActivityRecord],
    now: datetime,
    groups: Groups,
) -> Tuple[Dict[str, float], Dict[str, float]]:
    """(activity totals, group totals) for records ending since this Monday 00:00."""
    monday = datetime.combine(week_start(now.date()), time.min, tzinfo=now.tzinfo)
    this_week = records_between(records, monday, now)
    per_activity = activity_totals(this_week)
    return per_activity, group_totals(per_activity, groups)


def deviation_from_average(daily: Sequence[DailyBucket]) -> List[Tuple[date, Optional[float]]]:
    """
    Each day's hours minus the mean over days with data.

    Sentinel days stay None. Returns [] when no day has data.
    """
    values = [b.total_hours for b in daily if b.has_data]
    if not values:
        return []
    avg = sum(values) / len(values)
    return [(b.date, b.total_hours - avg if b.has_data else None) for b in daily]
