# fitstudy/services/missions/engine.py
"""
Mission progression.

Derives a participant's study milestones from snapshots of their confirmed
bookings and the events they attended. Nothing is stored; the same input
and clock reading always produce the same list.

Missions, in order:
1. First assessment day
2. First body composition scan (after 1)
3. Touchpoint visits (after 2)
4. Reinforcement assessment day (after 3)
5. Follow-up assessment, three calendar months after the first assessment
   (after 4, and not before the unlock date)

A locked mission is always reported as not started.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import AbstractSet, Iterable, List, Optional, Sequence

from fitstudy.constants.event_category import EventCategory
from fitstudy.schemas.mission import MissionState, MissionStatus
from fitstudy.utils.time import add_months, ensure_utc

TOUCHPOINT_TARGET = 9
REINFORCEMENT_TARGET = 1
FOLLOW_UP_MONTHS = 3


@dataclass(frozen=True)
class BookedEvent:
    """A confirmed booking joined with the event it is for."""
    event_id: str
    category: EventCategory
    start_time: datetime


@dataclass(frozen=True)
class _Visit:
    event_id: str
    start_time: datetime
    attended: bool


@dataclass(frozen=True)
class _MissionInfo:
    id: int
    title: str
    description: str


FIRST_ASSESSMENT = _MissionInfo(1, "Assessment Day", "Complete your first assessment day")
FIRST_SCAN = _MissionInfo(2, "Body Composition Scan", "Complete your DEXA scan")
TOUCHPOINTS = _MissionInfo(
    3, f"{TOUCHPOINT_TARGET} Touchpoints", f"Attend {TOUCHPOINT_TARGET} touchpoint sessions"
)
REINFORCEMENT = _MissionInfo(
    4, "Reinforcement Assessment Day", "Complete 1 additional assessment day"
)
FOLLOW_UP = _MissionInfo(
    5,
    "3-Month Follow-up Assessment",
    "Complete your follow-up assessment day three months after your first",
)


def _partition(
    bookings: Iterable[BookedEvent], attended_event_ids: AbstractSet[str]
) -> dict:
    """Group visits by category, each group ordered by (start_time, event_id)."""
    tracks: dict = {category: {} for category in EventCategory}
    for booked in bookings:
        visit = _Visit(
            event_id=booked.event_id,
            start_time=ensure_utc(booked.start_time),
            attended=booked.event_id in attended_event_ids,
        )
        tracks[EventCategory(booked.category)][booked.event_id] = visit
    return {
        category: sorted(visits.values(), key=lambda v: (v.start_time, v.event_id))
        for category, visits in tracks.items()
    }


def _first_visit_state(visits: Sequence[_Visit]) -> MissionState:
    if not visits:
        return MissionState.NOT_STARTED
    return MissionState.COMPLETED if visits[0].attended else MissionState.INCOMPLETE


def _count_state(visits: Sequence[_Visit], target: int) -> MissionState:
    attended = sum(1 for v in visits if v.attended)
    if attended >= target:
        return MissionState.COMPLETED
    if visits:
        return MissionState.INCOMPLETE
    return MissionState.NOT_STARTED


def _progress(visits: Sequence[_Visit], target: int) -> str:
    attended = sum(1 for v in visits if v.attended)
    return f"{attended}/{target} completed ({len(visits)} booked)"


def _mission(
    info: _MissionInfo,
    status: MissionState,
    *,
    locked: bool,
    progress_text: Optional[str] = None,
    unlock_date: Optional[datetime] = None,
) -> MissionStatus:
    if locked:
        status = MissionState.NOT_STARTED
        progress_text = None
    elif status == MissionState.NOT_STARTED:
        progress_text = None
    return MissionStatus(
        id=info.id,
        title=info.title,
        description=info.description,
        status=status,
        locked=locked,
        progress_text=progress_text,
        unlock_date=unlock_date,
    )


def follow_up_unlock_date(first_assessment_start: datetime) -> datetime:
    return add_months(ensure_utc(first_assessment_start), FOLLOW_UP_MONTHS)


def compute_missions(
    bookings: Iterable[BookedEvent],
    attended_event_ids: AbstractSet[str],
    now: datetime,
) -> List[MissionStatus]:
    """Compute the ordered mission list for one participant."""
    now = ensure_utc(now)
    tracks = _partition(bookings, attended_event_ids)
    assessments = tracks[EventCategory.ASSESSMENT]
    scans = tracks[EventCategory.SCAN]
    touchpoints = tracks[EventCategory.TOUCHPOINT]

    first = _mission(FIRST_ASSESSMENT, _first_visit_state(assessments), locked=False)

    scan = _mission(
        FIRST_SCAN,
        _first_visit_state(scans),
        locked=first.status != MissionState.COMPLETED,
    )

    touchpoint = _mission(
        TOUCHPOINTS,
        _count_state(touchpoints, TOUCHPOINT_TARGET),
        locked=scan.status != MissionState.COMPLETED,
        progress_text=_progress(touchpoints, TOUCHPOINT_TARGET),
    )

    extra_assessments = assessments[1:]
    reinforcement = _mission(
        REINFORCEMENT,
        _count_state(extra_assessments, REINFORCEMENT_TARGET),
        locked=touchpoint.status != MissionState.COMPLETED,
        progress_text=_progress(extra_assessments, REINFORCEMENT_TARGET),
    )

    unlock_date = follow_up_unlock_date(assessments[0].start_time) if assessments else None
    follow_ups = (
        [v for v in assessments if v.start_time >= unlock_date] if unlock_date else []
    )
    if any(v.attended for v in follow_ups):
        follow_up_state = MissionState.COMPLETED
    elif follow_ups:
        follow_up_state = MissionState.INCOMPLETE
    else:
        follow_up_state = MissionState.NOT_STARTED
    follow_up = _mission(
        FOLLOW_UP,
        follow_up_state,
        locked=(
            unlock_date is None
            or now < unlock_date
            or reinforcement.status != MissionState.COMPLETED
        ),
        unlock_date=unlock_date,
    )

    return [first, scan, touchpoint, reinforcement, follow_up]
