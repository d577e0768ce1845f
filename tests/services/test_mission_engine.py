"""
Tests for the mission engine.

The engine is pure, so these tests build snapshots directly instead of
going through the database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fitstudy.constants.event_category import EventCategory
from fitstudy.schemas.mission import MissionState
from fitstudy.services.missions import BookedEvent, compute_missions, follow_up_unlock_date

UTC = timezone.utc
FIRST_ASSESSMENT_AT = datetime(2024, 1, 31, 10, 0, tzinfo=UTC)
RANK = {MissionState.NOT_STARTED: 0, MissionState.INCOMPLETE: 1, MissionState.COMPLETED: 2}


def _booked(event_id, category, start_time):
    return BookedEvent(event_id=event_id, category=category, start_time=start_time)


def _full_history():
    """A participant who books everything the study asks for, in order."""
    history = [
        _booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT),
        _booked("s1", EventCategory.SCAN, FIRST_ASSESSMENT_AT + timedelta(days=7)),
    ]
    history += [
        _booked(f"t{i}", EventCategory.TOUCHPOINT, FIRST_ASSESSMENT_AT + timedelta(days=10 + i))
        for i in range(1, 10)
    ]
    history += [
        _booked("a2", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT + timedelta(days=40)),
        _booked("a3", EventCategory.ASSESSMENT, datetime(2024, 5, 6, 10, 0, tzinfo=UTC)),
    ]
    return history


def _by_id(missions):
    return {m.id: m for m in missions}


class TestMissionOrderingAndGating:

    def test_brand_new_participant(self):
        missions = compute_missions([], set(), FIRST_ASSESSMENT_AT)

        assert [m.id for m in missions] == [1, 2, 3, 4, 5]
        assert missions[0].status == MissionState.NOT_STARTED
        assert missions[0].locked is False
        for mission in missions[1:]:
            assert mission.locked is True
            assert mission.status == MissionState.NOT_STARTED
        assert missions[4].unlock_date is None

    def test_booked_but_not_attended_first_assessment(self):
        missions = _by_id(compute_missions(
            [_booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT)], set(), FIRST_ASSESSMENT_AT
        ))

        assert missions[1].status == MissionState.INCOMPLETE
        assert missions[2].locked is True

    def test_attended_assessment_unlocks_scan(self):
        bookings = [
            _booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT),
            _booked("s1", EventCategory.SCAN, FIRST_ASSESSMENT_AT + timedelta(days=3)),
        ]

        missions = _by_id(compute_missions(bookings, {"a1"}, FIRST_ASSESSMENT_AT + timedelta(days=1)))

        assert missions[1].status == MissionState.COMPLETED
        assert missions[2].locked is False
        assert missions[2].status == MissionState.INCOMPLETE
        assert missions[3].locked is True

    def test_only_the_earliest_assessment_counts_for_mission_one(self):
        bookings = [
            _booked("a_late", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT + timedelta(days=20)),
            _booked("a_early", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT),
        ]

        missions = _by_id(compute_missions(bookings, {"a_late"}, FIRST_ASSESSMENT_AT))

        assert missions[1].status == MissionState.INCOMPLETE

    def test_scan_attended_while_locked_is_not_reported(self):
        bookings = [
            _booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT),
            _booked("s1", EventCategory.SCAN, FIRST_ASSESSMENT_AT + timedelta(days=3)),
        ]

        missions = _by_id(compute_missions(bookings, {"s1"}, FIRST_ASSESSMENT_AT))

        assert missions[2].locked is True
        assert missions[2].status == MissionState.NOT_STARTED

    def test_other_events_are_ignored(self):
        bookings = [_booked("o1", EventCategory.OTHER, FIRST_ASSESSMENT_AT)]

        missions = compute_missions(bookings, {"o1"}, FIRST_ASSESSMENT_AT)

        assert missions == compute_missions([], set(), FIRST_ASSESSMENT_AT)


class TestTouchpointsAndReinforcement:

    def setup_method(self):
        self.bookings = _full_history()
        self.now = datetime(2024, 3, 15, tzinfo=UTC)

    def test_touchpoint_progress_text(self):
        attended = {"a1", "s1", "t1", "t2", "t3"}

        missions = _by_id(compute_missions(self.bookings, attended, self.now))

        assert missions[3].status == MissionState.INCOMPLETE
        assert missions[3].progress_text == "3/9 completed (9 booked)"
        assert missions[4].locked is True
        assert missions[4].progress_text is None

    def test_touchpoints_without_bookings_not_started(self):
        bookings = [b for b in self.bookings if b.category != EventCategory.TOUCHPOINT]

        missions = _by_id(compute_missions(bookings, {"a1", "s1"}, self.now))

        assert missions[3].locked is False
        assert missions[3].status == MissionState.NOT_STARTED
        assert missions[3].progress_text is None

    def test_nine_touchpoints_unlock_reinforcement(self):
        attended = {"a1", "s1"} | {f"t{i}" for i in range(1, 10)}

        missions = _by_id(compute_missions(self.bookings, attended, self.now))

        assert missions[3].status == MissionState.COMPLETED
        assert missions[3].progress_text == "9/9 completed (9 booked)"
        assert missions[4].locked is False
        assert missions[4].status == MissionState.INCOMPLETE
        assert missions[4].progress_text == "0/1 completed (2 booked)"

    def test_reinforcement_completed_by_second_assessment(self):
        attended = {"a1", "s1", "a2"} | {f"t{i}" for i in range(1, 10)}

        missions = _by_id(compute_missions(self.bookings, attended, self.now))

        assert missions[4].status == MissionState.COMPLETED
        assert missions[4].progress_text == "1/1 completed (2 booked)"


class TestFollowUpMission:

    def setup_method(self):
        self.bookings = _full_history()
        self.everything = {b.event_id for b in self.bookings}

    def test_unlock_date_clamps_to_end_of_april(self):
        assert follow_up_unlock_date(FIRST_ASSESSMENT_AT) == datetime(2024, 4, 30, 10, 0, tzinfo=UTC)

    def test_locked_before_unlock_date_even_if_attended(self):
        now = datetime(2024, 4, 29, 12, 0, tzinfo=UTC)

        follow_up = compute_missions(self.bookings, self.everything, now)[4]

        assert follow_up.locked is True
        assert follow_up.status == MissionState.NOT_STARTED
        assert follow_up.unlock_date == datetime(2024, 4, 30, 10, 0, tzinfo=UTC)

    def test_completed_once_unlocked(self):
        now = datetime(2024, 4, 30, 10, 0, tzinfo=UTC)

        follow_up = compute_missions(self.bookings, self.everything, now)[4]

        assert follow_up.locked is False
        assert follow_up.status == MissionState.COMPLETED

    def test_booked_follow_up_not_yet_attended(self):
        now = datetime(2024, 5, 1, tzinfo=UTC)

        follow_up = compute_missions(self.bookings, self.everything - {"a3"}, now)[4]

        assert follow_up.locked is False
        assert follow_up.status == MissionState.INCOMPLETE

    def test_no_follow_up_booked(self):
        bookings = [b for b in self.bookings if b.event_id != "a3"]
        now = datetime(2024, 5, 1, tzinfo=UTC)

        follow_up = compute_missions(bookings, self.everything, now)[4]

        assert follow_up.locked is False
        assert follow_up.status == MissionState.NOT_STARTED

    def test_stays_locked_until_reinforcement_done(self):
        now = datetime(2024, 6, 1, tzinfo=UTC)

        follow_up = compute_missions(self.bookings, {"a1", "s1", "a3"}, now)[4]

        assert follow_up.locked is True
        assert follow_up.status == MissionState.NOT_STARTED
        assert follow_up.unlock_date == datetime(2024, 4, 30, 10, 0, tzinfo=UTC)


class TestMissionProperties:

    def test_same_timestamp_ties_are_stable(self):
        tied = [
            _booked("s_b", EventCategory.SCAN, FIRST_ASSESSMENT_AT + timedelta(days=2)),
            _booked("s_a", EventCategory.SCAN, FIRST_ASSESSMENT_AT + timedelta(days=2)),
            _booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT),
        ]
        attended = {"a1", "s_a"}

        forward = compute_missions(tied, attended, FIRST_ASSESSMENT_AT)
        backward = compute_missions(list(reversed(tied)), attended, FIRST_ASSESSMENT_AT)

        assert forward == backward
        assert forward[1].status == MissionState.COMPLETED

    @pytest.mark.parametrize("reverse", [False, True])
    def test_adding_attendance_never_downgrades(self, reverse):
        bookings = _full_history()
        order = [b.event_id for b in bookings]
        if reverse:
            order.reverse()
        now = datetime(2024, 6, 1, tzinfo=UTC)

        attended = set()
        previous = compute_missions(bookings, attended, now)
        for event_id in order:
            attended.add(event_id)
            current = compute_missions(bookings, attended, now)
            for before, after in zip(previous, current):
                assert RANK[after.status] >= RANK[before.status]
                assert not (before.locked is False and after.locked is True)
            previous = current

        assert all(m.status == MissionState.COMPLETED for m in previous)

    def test_later_mission_never_progresses_past_an_unfinished_one(self):
        bookings = _full_history()
        now = datetime(2024, 6, 1, tzinfo=UTC)
        attended = set()

        for event_id in reversed([b.event_id for b in bookings]):
            attended.add(event_id)
            missions = compute_missions(bookings, attended, now)
            for earlier, later in zip(missions, missions[1:]):
                if earlier.status != MissionState.COMPLETED:
                    assert later.locked is True
                    assert later.status == MissionState.NOT_STARTED

    def test_passing_time_only_unlocks(self):
        bookings = _full_history()
        attended = {b.event_id for b in bookings}

        before = compute_missions(bookings, attended, datetime(2024, 4, 1, tzinfo=UTC))
        after = compute_missions(bookings, attended, datetime(2024, 5, 1, tzinfo=UTC))

        assert before[4].locked is True
        assert after[4].locked is False
        assert before[:4] == after[:4]

    def test_naive_timestamps_are_read_as_utc(self):
        naive = [_booked("a1", EventCategory.ASSESSMENT, FIRST_ASSESSMENT_AT.replace(tzinfo=None))]

        follow_up = compute_missions(naive, {"a1"}, FIRST_ASSESSMENT_AT)[4]

        assert follow_up.unlock_date == datetime(2024, 4, 30, 10, 0, tzinfo=UTC)
