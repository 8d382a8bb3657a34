"""Calendar-aligned daily and weekly hour totals from time-logger exports.

Modules: models, errors, loader, groups, aggregate, summary, report, pipeline.
"""

from activity_buckets.aggregate import (
    bucket_by_day,
    bucket_by_week,
    group_records,
    weekly_group_matrix,
    which_group,
)
from activity_buckets.errors import EmptyInputError, OverlappingGroupsWarning, UnorderedInputError
from activity_buckets.models import (
    ActivityRecord,
    CategoryGroup,
    DailyBucket,
    WeeklyBucket,
    WeeklyGroupTotals,
)

__all__ = [
    "ActivityRecord",
    "CategoryGroup",
    "DailyBucket",
    "WeeklyBucket",
    "WeeklyGroupTotals",
    "EmptyInputError",
    "UnorderedInputError",
    "OverlappingGroupsWarning",
    "bucket_by_day",
    "bucket_by_week",
    "group_records",
    "weekly_group_matrix",
    "which_group",
]
