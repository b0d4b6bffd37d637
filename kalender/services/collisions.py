"""Service for detecting room collisions between a candidate slot and stored events."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import date

from kalender.domain.models import CollisionCandidate, Event, EventDraft
from kalender.services.occurrences import (
    MAX_OCCURRENCES,
    expand_occurrences,
    occurs_on_day,
)
from kalender.services.overlap import Span, spans_collide

logger = logging.getLogger(__name__)


def occurrence_spans(
    event: Event, until: date, max_occurrences: int = MAX_OCCURRENCES
) -> Iterator[Span]:
    """Yield the concrete spans of *event* that start on or before *until*.

    Rows whose recurrence was never materialized are stepped through their
    first *max_occurrences* occurrences, keeping the starts that
    :func:`occurs_on_day` accepts; every other row is a single span.
    """
    if not event.is_expandable:
        yield Span.build(event.start_date, event.end_date, event.start_time, event.end_time)
        return

    for start_date, end_date in expand_occurrences(event, max_occurrences):
        if start_date > until:
            return
        if occurs_on_day(event, start_date):
            yield Span.build(start_date, end_date, event.start_time, event.end_time)


def find_collisions(
    candidate: CollisionCandidate,
    existing_events: Mapping[str, Event] | Iterable[Event],
    exclude_id: str | None = None,
    *,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Event]:
    """Return the stored events that collide with *candidate*.

    Collision rule: same room (when the candidate names one) and the spans
    overlap half-open, except that an all-day span collides with anything on
    the same date. The event identified by *exclude_id* never collides with
    itself. Each colliding series is reported once through its owning row, in
    discovery order. Collisions are advisory; nothing here blocks a save.
    """
    if candidate is None:
        raise TypeError("candidate must not be None")
    if isinstance(existing_events, Mapping):
        existing_events = existing_events.values()

    target = Span.build(
        candidate.start_date, candidate.end_date, candidate.start_time, candidate.end_time
    )

    collisions: list[Event] = []
    seen: set[str] = set()
    for event in existing_events:
        if event.id == exclude_id or event.id in seen:
            continue
        if candidate.room_id is not None and event.room_id != candidate.room_id:
            continue

        spans = occurrence_spans(event, candidate.end_date, max_occurrences)
        if any(spans_collide(span, target) for span in spans):
            seen.add(event.id)
            collisions.append(event)

    if collisions:
        logger.info(
            "Slot %s %s-%s in %s collides with %d event(s)",
            candidate.start_date,
            candidate.start_time,
            candidate.end_time,
            candidate.room_id or "any room",
            len(collisions),
        )
    return collisions


def find_draft_collisions(
    drafts: Iterable[EventDraft],
    existing_events: Iterable[Event],
    exclude_ids: Iterable[str] = (),
    *,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Event]:
    """Collisions for every row about to be saved, skipping rows being replaced."""
    excluded = set(exclude_ids)
    others = [e for e in existing_events if e.id not in excluded]

    collisions: list[Event] = []
    seen: set[str] = set()
    for draft in drafts:
        for event in find_collisions(
            CollisionCandidate.from_event(draft), others, max_occurrences=max_occurrences
        ):
            if event.id not in seen:
                seen.add(event.id)
                collisions.append(event)
    return collisions
