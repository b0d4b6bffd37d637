"""Tests for the collision detector."""

from __future__ import annotations

from datetime import date

import pytest

from kalender.domain.models import CollisionCandidate, Event, RepeatType
from kalender.services.collisions import find_collisions, find_draft_collisions


def _make_event(**overrides) -> Event:
    defaults = dict(
        title="Lesung",
        room_id="kabinett",
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 10),
        start_time="18:00",
        end_time="20:00",
    )
    defaults.update(overrides)
    return Event(**defaults)


def _candidate(**overrides) -> CollisionCandidate:
    defaults = dict(
        room_id="kabinett",
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 10),
        start_time="19:00",
        end_time="21:00",
    )
    defaults.update(overrides)
    return CollisionCandidate(**defaults)


def test_overlapping_slot_in_same_room_collides():
    a = _make_event()
    assert find_collisions(_candidate(), [a]) == [a]


def test_touching_slot_does_not_collide():
    a = _make_event()
    assert find_collisions(_candidate(start_time="20:00", end_time="22:00"), [a]) == []


def test_other_room_does_not_collide():
    a = _make_event(room_id="speckdrumm")
    assert find_collisions(_candidate(), [a]) == []


def test_without_room_filter_every_room_is_checked():
    a = _make_event(room_id="speckdrumm")
    assert find_collisions(_candidate(room_id=None), [a]) == [a]


def test_excluded_event_never_collides_with_itself():
    a = _make_event()
    candidate = CollisionCandidate.from_event(a)
    assert find_collisions(candidate, [a], exclude_id=a.id) == []


def test_accepts_mapping_keyed_by_id():
    a = _make_event()
    assert find_collisions(_candidate(), {a.id: a}) == [a]


def test_all_day_event_blocks_the_room():
    a = _make_event(start_time="00:00", end_time="23:59")
    candidate = _candidate(start_time="07:00", end_time="08:00")
    assert find_collisions(candidate, [a]) == [a]


def test_all_day_candidate_collides_with_short_event():
    a = _make_event(start_time="09:00", end_time="09:30")
    candidate = _candidate(start_time="00:00", end_time="23:59")
    assert find_collisions(candidate, [a]) == [a]


def test_multi_day_event_spans_midnight():
    a = _make_event(end_date=date(2025, 3, 11), start_time="22:00", end_time="02:00")
    candidate = _candidate(start_date=date(2025, 3, 11), end_date=date(2025, 3, 11),
                           start_time="01:00", end_time="03:00")
    assert find_collisions(candidate, [a]) == [a]


def test_results_keep_discovery_order():
    first = _make_event(title="First")
    second = _make_event(title="Second", start_time="19:30", end_time="22:00")
    assert find_collisions(_candidate(), [first, second]) == [first, second]


def test_none_candidate_is_a_programming_error():
    with pytest.raises(TypeError):
        find_collisions(None, [])


# ---------------------------------------------------------------------------
# Recurring events that were never materialized
# ---------------------------------------------------------------------------


def _every_other_day() -> Event:
    return _make_event(
        title="Probe",
        room_id="speckdrumm",
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 1),
        start_time="10:00",
        end_time="11:00",
        repeat_type=RepeatType.DAILY,
        repeat_interval=2,
        repeat_until=date(2025, 4, 9),
    )


def test_recurring_series_collides_on_matching_day():
    series = _every_other_day()
    candidate = _candidate(
        room_id="speckdrumm",
        start_date=date(2025, 4, 5),
        end_date=date(2025, 4, 5),
        start_time="10:30",
        end_time="10:45",
    )
    assert find_collisions(candidate, [series]) == [series]


def test_recurring_series_skips_off_days():
    series = _every_other_day()
    candidate = _candidate(
        room_id="speckdrumm",
        start_date=date(2025, 4, 6),
        end_date=date(2025, 4, 6),
        start_time="10:30",
        end_time="10:45",
    )
    assert find_collisions(candidate, [series]) == []


def test_recurring_series_ends_at_horizon():
    series = _every_other_day()
    candidate = _candidate(
        room_id="speckdrumm",
        start_date=date(2025, 4, 11),
        end_date=date(2025, 4, 11),
        start_time="10:00",
        end_time="11:00",
    )
    assert find_collisions(candidate, [series]) == []


def test_series_spanning_several_hits_is_reported_once():
    series = _every_other_day()
    candidate = _candidate(
        room_id="speckdrumm",
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 9),
        start_time="00:00",
        end_time="23:59",
    )
    assert find_collisions(candidate, [series]) == [series]


def test_recurring_scan_honours_occurrence_cap():
    series = _make_event(
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 1),
        repeat_type=RepeatType.DAILY,
        repeat_until=date(2025, 12, 31),
    )
    inside = _candidate(start_date=date(2025, 4, 10), end_date=date(2025, 4, 10))
    beyond = _candidate(start_date=date(2025, 4, 11), end_date=date(2025, 4, 11))

    # 2025-04-10 is the 100th day of the series.
    assert find_collisions(inside, [series]) == [series]
    assert find_collisions(beyond, [series]) == []


def test_materialized_rows_are_checked_as_single_occurrences():
    first = _make_event(
        repeat_type=RepeatType.WEEKLY,
        repeat_until=date(2025, 3, 24),
        repeat_group_id="repeat_1",
    )
    second = _make_event(
        start_date=date(2025, 3, 17),
        end_date=date(2025, 3, 17),
        repeat_type=RepeatType.WEEKLY,
        repeat_until=date(2025, 3, 24),
        repeat_group_id="repeat_1",
    )
    candidate = _candidate(start_date=date(2025, 3, 17), end_date=date(2025, 3, 17))
    assert find_collisions(candidate, [first, second]) == [second]


# ---------------------------------------------------------------------------
# find_draft_collisions
# ---------------------------------------------------------------------------


def test_draft_collisions_merge_and_skip_replaced_rows():
    a = _make_event(title="A")
    b = _make_event(title="B", start_date=date(2025, 3, 17), end_date=date(2025, 3, 17))
    replaced = _make_event(title="Old")

    drafts = [
        _make_event(title="New"),
        _make_event(title="New", start_date=date(2025, 3, 17), end_date=date(2025, 3, 17)),
    ]
    found = find_draft_collisions(drafts, [a, b, replaced], exclude_ids=[replaced.id])
    assert found == [a, b]


def test_recurring_scan_counts_steps_not_matches():
    series = _make_event(
        repeat_type=RepeatType.YEARLY,
        repeat_until=date(2200, 1, 1),
    )
    # 2124 is the 100th year of the series, 2125 would be the 101st.
    inside = _candidate(start_date=date(2124, 3, 10), end_date=date(2124, 3, 10))
    beyond = _candidate(start_date=date(2125, 3, 10), end_date=date(2125, 3, 10))

    assert find_collisions(inside, [series]) == [series]
    assert find_collisions(beyond, [series]) == []


def test_sparse_series_with_distant_horizon_is_not_walked_day_by_day():
    rows = [
        _make_event(
            start_date=date(2025, 1, 6),
            end_date=date(2025, 1, 6),
            repeat_type=RepeatType.MONTHLY_WEEKDAY,
            repeat_until=date(9000, 1, 1),
        )
        for _ in range(20)
    ]
    candidate = _candidate(start_date=date(8999, 1, 1), end_date=date(8999, 1, 1))
    assert find_collisions(candidate, rows) == []


def test_series_near_end_of_calendar_does_not_raise():
    series = _make_event(
        start_date=date(9999, 1, 4),
        end_date=date(9999, 1, 4),
        repeat_type=RepeatType.YEARLY,
        repeat_until=date(9999, 12, 31),
    )
    late = _candidate(start_date=date(9999, 12, 31), end_date=date(9999, 12, 31))
    same_day = _candidate(start_date=date(9999, 1, 4), end_date=date(9999, 1, 4))

    assert find_collisions(late, [series]) == []
    assert find_collisions(same_day, [series]) == [series]
