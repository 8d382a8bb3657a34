"""Exceptions and warnings raised while bucketing activity records."""

from __future__ import annotations


class EmptyInputError(ValueError):
    """Aggregation was requested over zero records (no date range exists)."""


class UnorderedInputError(ValueError):
    """Daily buckets were not in strictly ascending date order."""


class OverlappingGroupsWarning(UserWarning):
    """A category is listed in more than one group; the first group wins."""
