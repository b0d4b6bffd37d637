"""Read-side projections over the stored events: month grid, date windows and
the recently-changed list. Each one is a thin view over ``covers_day``."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date

from kalender.domain.models import CalendarDay, Event, Room
from kalender.services.occurrences import MAX_OCCURRENCES, covers_day, expand_occurrences


def days_in_month(year: int, month: int) -> list[date]:
    _, last = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last + 1)]


def group_by_day_and_room(
    events: Iterable[Event], days: list[date], rooms: list[Room]
) -> list[CalendarDay]:
    """Build the calendar grid: for each day, the events per room covering it.

    Events in rooms that are not configured are left out. Within a cell,
    events keep their input order and appear once.
    """
    events = list(events)
    grid = []
    for day in days:
        cells: dict[str, list[Event]] = {room.id: [] for room in rooms}
        for event in events:
            cell = cells.get(event.room_id)
            if cell is None or not covers_day(event, day):
                continue
            if all(e.id != event.id for e in cell):
                cell.append(event)
        grid.append(CalendarDay(day=day, rooms=cells))
    return grid


def events_in_window(
    events: Iterable[Event],
    start: date,
    end: date,
    room_id: str | None = None,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Event]:
    """Return events with at least one covered day inside ``[start, end]``.

    Unmaterialized series are checked occurrence by occurrence, up to
    *max_occurrences* of them.
    """
    result = []
    for event in events:
        if room_id is not None and event.room_id != room_id:
            continue
        if event.is_expandable:
            if _occurs_in_window(event, start, end, max_occurrences):
                result.append(event)
        elif event.start_date <= end and event.end_date >= start:
            result.append(event)
    return result


def _occurs_in_window(
    event: Event, start: date, end: date, max_occurrences: int
) -> bool:
    for occurrence, _ in expand_occurrences(event, max_occurrences):
        if occurrence > end:
            return False
        if occurrence >= start and covers_day(event, occurrence):
            return True
    return False


def recent_series(events: Iterable[Event], limit: int = 50) -> list[Event]:
    """One representative per series or standalone event, newest change first.

    A series counts as changed when any of its rows was; its representative is
    the earliest row.
    """
    groups: dict[str, list[Event]] = {}
    for event in events:
        key = event.repeat_group_id or event.id
        groups.setdefault(key, []).append(event)

    def latest(rows: list[Event]):
        return max(e.updated_at for e in rows)

    ordered = sorted(groups.values(), key=latest, reverse=True)[:limit]
    return [min(rows, key=lambda e: (e.start_date, e.start_time)) for rows in ordered]
