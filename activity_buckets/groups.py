"""
Category groups: many activity types rolled up under one name.

Groups are plain configuration. They keep the order they were declared in,
which is also the order used to resolve a category listed in two groups.
"""

from __future__ import annotations

import json
import warnings
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

from activity_buckets.errors import OverlappingGroupsWarning
from activity_buckets.models import CategoryGroup


# Example configuration used when no --groups file is given; replace with
# your own activity types. Order matters: stacked charts draw groups
# bottom-up in this order.
DEFAULT_GROUPS: Dict[str, List[str]] = {
    "Sleep": ["Sleep"],
    "Work": ["Work", "Meeting", "Study"],
    "Health": ["Sport", "Walking", "Cooking"],
    "Chores": ["Cleaning", "Shopping", "Transport"],
    "Leisure": ["Entertainment", "Reading", "Friends", "Family"],
}


def find_overlaps(groups: Iterable[CategoryGroup]) -> Dict[str, List[str]]:
    """Return {category: [group names]} for categories listed in 2+ groups."""
    owners: Dict[str, List[str]] = defaultdict(list)
    for group in groups:
        for category in sorted(group.members):
            owners[category].append(group.name)
    return {cat: names for cat, names in owners.items() if len(names) > 1}


def build_groups(mapping: Mapping[str, Iterable[str]]) -> List[CategoryGroup]:
    """
    Build CategoryGroups from {name: [category, ...]}.

    Overlapping membership is not an error; it is reported once here with an
    OverlappingGroupsWarning and later resolved to the first declared group.
    """
    groups = [
        CategoryGroup(name=str(name), members=frozenset(str(c) for c in members))
        for name, members in mapping.items()
    ]

    overlaps = find_overlaps(groups)
    if overlaps:
        details = "; ".join(
            f"'{cat}' in {', '.join(names)} (using {names[0]})"
            for cat, names in sorted(overlaps.items())
        )
        warnings.warn(
            f"Categories listed in more than one group: {details}",
            OverlappingGroupsWarning,
            stacklevel=2,
        )
    return groups


def load_groups(filepath) -> List[CategoryGroup]:
    """Load groups from a JSON object of {group name: [activity type, ...]}."""
    path = Path(filepath)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise FileNotFoundError(f"Groups file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in groups file: {e}")

    if not isinstance(data, dict):
        raise TypeError(f"Groups file must contain a JSON object, got {type(data).__name__}")
    for name, members in data.items():
        if not isinstance(members, list):
            raise TypeError(
                f"Group '{name}' must list its activity types, got {type(members).__name__}"
            )

    return build_groups(data)
