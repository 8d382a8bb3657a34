"""
Record and bucket types shared by the loader, aggregator and reports.

- ActivityRecord: one logged interval (activity type, from, to)
- DailyBucket: hours ending on a calendar day, or None when nothing was logged
- WeeklyBucket: hours for a Monday-aligned week
- CategoryGroup: named set of activity types reported together
- WeeklyGroupTotals: one row of the week x group matrix
"""

from __future__ import annotations

import dataclasses as dc
from datetime import date, datetime
from typing import Dict, FrozenSet, Optional


SECONDS_PER_HOUR = 3600.0


@dc.dataclass(frozen=True)
class ActivityRecord:
    category: str
    start: datetime
    end: datetime
    # Hours from the export's HH:MM "Duration" column, when present
    logged_hours: Optional[float] = None
    comment: str = ""

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(
                f"Record '{self.category}' ends before it starts: {self.start} -> {self.end}"
            )

    @property
    def duration_hours(self) -> float:
        if self.logged_hours is not None:
            return self.logged_hours
        return (self.end - self.start).total_seconds() / SECONDS_PER_HOUR

    @property
    def day(self) -> date:
        """Calendar day the record is attributed to (the day it ends)."""
        return self.end.date()


@dc.dataclass(frozen=True)
class DailyBucket:
    date: date
    total_hours: Optional[float] = None  # None: no records ended on this day

    @property
    def has_data(self) -> bool:
        return self.total_hours is not None


@dc.dataclass(frozen=True)
class WeeklyBucket:
    week_start: date  # Monday
    total_hours: float = 0.0
    days_with_data: int = 0

    @property
    def has_data(self) -> bool:
        return self.days_with_data > 0


@dc.dataclass(frozen=True)
class CategoryGroup:
    name: str
    members: FrozenSet[str] = frozenset()

    def __contains__(self, category: str) -> bool:
        return category in self.members


@dc.dataclass(frozen=True)
class WeeklyGroupTotals:
    week_start: date
    totals: Dict[str, float] = dc.field(default_factory=dict)
