# fitstudy/constants/event_category.py
"""
Study event categories.

Every decision keyed on a category goes through one of the tables below.
They must cover every member of EventCategory; adding a category without
extending them fails at import time.
"""

from enum import Enum


class EventCategory(str, Enum):
    ASSESSMENT = "assessment"
    SCAN = "scan"
    TOUCHPOINT = "touchpoint"
    OTHER = "other"


CATEGORY_LABELS: dict[EventCategory, str] = {
    EventCategory.ASSESSMENT: "Assessment Day",
    EventCategory.SCAN: "Body Composition Scan",
    EventCategory.TOUCHPOINT: "Touchpoint",
    EventCategory.OTHER: "Study Event",
}

# A participant may hold only one confirmed future booking per category
# where this is True.
SINGLE_ACTIVE: dict[EventCategory, bool] = {
    EventCategory.ASSESSMENT: True,
    EventCategory.SCAN: True,
    EventCategory.TOUCHPOINT: False,
    EventCategory.OTHER: False,
}


def _check_exhaustive(table: dict, name: str) -> None:
    missing = set(EventCategory) - set(table)
    if missing:
        raise RuntimeError(
            f"{name} is missing categories: {sorted(c.value for c in missing)}"
        )


_check_exhaustive(CATEGORY_LABELS, "CATEGORY_LABELS")
_check_exhaustive(SINGLE_ACTIVE, "SINGLE_ACTIVE")


def category_label(category: EventCategory) -> str:
    return CATEGORY_LABELS[EventCategory(category)]


def is_single_active(category: EventCategory) -> bool:
    return SINGLE_ACTIVE[EventCategory(category)]
