"""FastAPI application: entry point for the room calendar service."""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import FastAPI, HTTPException, Query

from kalender.config import get_settings
from kalender.domain.models import (
    CalendarDay,
    CollisionCandidate,
    CollisionCheckRequest,
    DeleteResponse,
    Event,
    EventDraft,
    RepeatScope,
    Room,
    SaveResponse,
)
from kalender.log import configure_logging
from kalender.repos.memory import EventRepository
from kalender.services.calendar import (
    days_in_month,
    events_in_window,
    group_by_day_and_room,
    recent_series,
)
from kalender.services.collisions import find_collisions, find_draft_collisions
from kalender.services.materializer import materialize

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = EventRepository()


# ── Helpers ───────────────────────────────────────────────────────────


def _get_or_404(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _require_room(room_id: str) -> None:
    if room_id not in settings.room_ids():
        raise HTTPException(status_code=400, detail=f"Unknown room: {room_id}")


def _with_default_color(draft: EventDraft) -> EventDraft:
    if "color" in draft.model_fields_set:
        return draft
    return draft.model_copy(update={"color": settings.default_color})


def _without_group(draft: EventDraft) -> EventDraft:
    """Group ids are only ever assigned by :func:`materialize`."""
    if draft.repeat_group_id is None:
        return draft
    return draft.model_copy(update={"repeat_group_id": None})


def _save_series(draft: EventDraft, replaced: list[Event]) -> SaveResponse:
    """Materialize *draft* and swap it in for *replaced* in one step."""
    drafts = materialize(draft, settings.max_occurrences)
    replaced_ids = [e.id for e in replaced]
    collisions = find_draft_collisions(
        drafts,
        event_repo.list_all(),
        exclude_ids=replaced_ids,
        max_occurrences=settings.max_occurrences,
    )

    rows = [Event.from_draft(d) for d in drafts]
    event_repo.delete_many(replaced_ids)
    event_repo.add_many(rows)
    logger.info(
        "Saved %d row(s) for %r, replaced %d", len(rows), draft.title, len(replaced)
    )
    return SaveResponse(events=rows, collisions=collisions)


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@app.get("/api/rooms", response_model=list[Room])
def list_rooms() -> list[Room]:
    """Return the configured rooms, sorted by name."""
    return sorted(settings.rooms, key=lambda r: r.name)


@app.get("/api/events", response_model=list[Event])
def list_events(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    room_id: str | None = Query(default=None, alias="roomId"),
) -> list[Event]:
    """Return stored events, optionally filtered, ordered by start."""
    return event_repo.list_filtered(start_date, end_date, room_id)


@app.get("/api/events/recent", response_model=list[Event])
def list_recent_events(limit: int | None = Query(default=None, ge=1)) -> list[Event]:
    """Return one row per series or standalone event, most recently changed first."""
    return recent_series(event_repo.list_all(), limit or settings.recent_limit)


@app.get("/api/events/range", response_model=list[Event])
def list_events_in_range(
    start: date,
    end: date,
    room_id: str | None = Query(default=None, alias="roomId"),
) -> list[Event]:
    """Return every event with an occurrence inside ``[start, end]``."""
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    return events_in_window(
        event_repo.list_all(), start, end, room_id, settings.max_occurrences
    )


@app.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    return _get_or_404(event_id)


@app.post("/api/events", response_model=SaveResponse, status_code=201)
def create_event(draft: EventDraft) -> SaveResponse:
    """Create an event; recurring drafts are materialized into one row per occurrence.

    Collisions are reported alongside the saved rows and never block the save.
    """
    _require_room(draft.room_id)
    return _save_series(_with_default_color(_without_group(draft)), replaced=[])


@app.put("/api/events/{event_id}", response_model=SaveResponse)
def update_event(
    event_id: str, draft: EventDraft, scope: RepeatScope = RepeatScope.SINGLE
) -> SaveResponse:
    """Update one row, or the whole series it belongs to.

    ``scope=single`` on a series member detaches that row from its series.
    ``scope=all`` deletes the series and materializes it again from *draft*.
    """
    existing = _get_or_404(event_id)
    _require_room(draft.room_id)
    draft = _without_group(draft)
    if "color" not in draft.model_fields_set:
        draft = draft.model_copy(update={"color": existing.color})

    in_series = existing.repeat_group_id is not None or existing.is_recurring
    if in_series and scope == RepeatScope.ALL:
        return _save_series(draft, replaced=event_repo.series_of(existing))
    if not in_series and draft.is_recurring:
        return _save_series(draft, replaced=[existing])

    if in_series:
        draft = draft.detached()
    updated = Event.from_draft(draft, id=existing.id, created_at=existing.created_at)
    collisions = find_collisions(
        CollisionCandidate.from_event(updated),
        event_repo.list_all(),
        exclude_id=existing.id,
        max_occurrences=settings.max_occurrences,
    )
    event_repo.replace(updated)
    logger.info("Updated event %s (%r)", updated.id, updated.title)
    return SaveResponse(events=[updated], collisions=collisions)


@app.delete("/api/events/{event_id}", response_model=DeleteResponse)
def delete_event(event_id: str, scope: RepeatScope = RepeatScope.SINGLE) -> DeleteResponse:
    """Delete one row, or every row of its series."""
    existing = _get_or_404(event_id)
    if scope == RepeatScope.ALL:
        targets = [e.id for e in event_repo.series_of(existing)]
    else:
        targets = [existing.id]
    deleted = event_repo.delete_many(targets)
    logger.info("Deleted %d row(s) starting from %s", len(deleted), event_id)
    return DeleteResponse(deleted=deleted)


@app.post("/api/collisions", response_model=list[Event])
def check_collisions(payload: CollisionCheckRequest) -> list[Event]:
    """Pre-save check: which stored events would the candidate slot collide with?"""
    if payload.candidate.room_id is not None:
        _require_room(payload.candidate.room_id)
    return find_collisions(
        payload.candidate,
        event_repo.list_all(),
        exclude_id=payload.exclude_id,
        max_occurrences=settings.max_occurrences,
    )


@app.get("/api/calendar", response_model=list[CalendarDay])
def month_grid(
    year: int = Query(ge=1, le=9999), month: int = Query(ge=1, le=12)
) -> list[CalendarDay]:
    """Return the month grid: per day, the events covering it in each room."""
    return group_by_day_and_room(
        event_repo.list_all(), days_in_month(year, month), settings.rooms
    )
