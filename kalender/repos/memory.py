"""In-memory repository for calendar events."""

from __future__ import annotations

from datetime import date

from kalender.domain.models import Event


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def add_many(self, events: list[Event]) -> None:
        for event in events:
            self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_filtered(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        room_id: str | None = None,
    ) -> list[Event]:
        """Events starting on/after *start_date* and ending on/before *end_date*,
        ordered by start date and time."""
        events = [
            e
            for e in self._store.values()
            if (start_date is None or e.start_date >= start_date)
            and (end_date is None or e.end_date <= end_date)
            and (room_id is None or e.room_id == room_id)
        ]
        return sorted(events, key=lambda e: (e.start_date, e.start_time))

    def list_group(self, repeat_group_id: str) -> list[Event]:
        return [e for e in self._store.values() if e.repeat_group_id == repeat_group_id]

    def series_of(self, event: Event) -> list[Event]:
        """Return every row of *event*'s series, *event* included.

        Rows without a ``repeat_group_id`` fall back to matching title, repeat
        type and horizon. That match is a heuristic and can sweep in unrelated
        events that happen to share all three.
        """
        if event.repeat_group_id:
            return self.list_group(event.repeat_group_id)
        if not event.is_recurring:
            return [event]
        return [
            e
            for e in self._store.values()
            if not e.repeat_group_id and e.same_series_fallback(event)
        ]

    def replace(self, event: Event) -> None:
        self._store[event.id] = event

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None

    def delete_many(self, event_ids: list[str]) -> list[str]:
        return [eid for eid in event_ids if self._store.pop(eid, None) is not None]
