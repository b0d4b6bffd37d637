"""Domain models for the room calendar."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"

_HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class RepeatType(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    MONTHLY_WEEKDAY = "monthly_weekday"
    YEARLY = "yearly"


class RepeatScope(StrEnum):
    """Which rows of a series an edit or delete applies to."""

    SINGLE = "single"
    ALL = "all"


class EventColor(StrEnum):
    RED = "#FF6B6B"
    TURQUOISE = "#4ECDC4"
    BLUE = "#45B7D1"
    GREEN = "#96CEB4"
    YELLOW = "#FFEAA7"
    PURPLE = "#DDA0DD"
    ORANGE = "#FFB347"
    MINT = "#98D8C8"
    GOLD = "#F7DC6F"
    LAVENDER = "#BB8FCE"
    SKY = "#85C1E9"
    PEACH = "#F8C471"
    MINT_GREEN = "#82E0AA"
    PINK = "#F1948A"
    BEIGE = "#FAD7A0"
    WHITE = "#FFFFFF"
    LIGHT_GREY = "#E0E0E0"
    GREY = "#808080"
    DARK_GREY = "#404040"
    BLACK = "#000000"


def _now() -> datetime:
    # Naive local wall-clock time, like every other value in the calendar.
    return datetime.now()


def _new_id() -> str:
    return str(uuid.uuid4())


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Room(_CamelModel):
    id: str
    name: str


class EventDraft(_CamelModel):
    """An event as authored, before it has been given an id and timestamps."""

    title: str = Field(min_length=1)
    description: str | None = None
    room_id: str
    start_date: date
    end_date: date
    start_time: str = Field(pattern=_HHMM)
    end_time: str = Field(pattern=_HHMM)
    color: EventColor = EventColor.RED
    repeat_type: RepeatType = RepeatType.NONE
    repeat_interval: int | None = Field(default=None, ge=1)
    repeat_until: date | None = None
    repeat_group_id: str | None = None
    repeat_weekday: int | None = Field(default=None, ge=1, le=7)
    repeat_week_of_month: int | None = Field(default=None, ge=1, le=5)

    @model_validator(mode="after")
    def _check_ranges(self) -> EventDraft:
        if not self.title.strip():
            raise ValueError("title must not be blank")
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.start_date == self.end_date and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.repeat_type == RepeatType.NONE and (
            self.repeat_until is not None or self.repeat_group_id is not None
        ):
            raise ValueError("repeat_until and repeat_group_id require a repeat_type")
        return self

    @property
    def is_all_day(self) -> bool:
        return self.start_time == ALL_DAY_START and self.end_time == ALL_DAY_END

    @property
    def is_recurring(self) -> bool:
        return self.repeat_type != RepeatType.NONE and self.repeat_until is not None

    @property
    def is_expandable(self) -> bool:
        """True for recurring rows whose occurrences were never materialized."""
        return self.is_recurring and self.repeat_group_id is None

    @property
    def interval(self) -> int:
        return self.repeat_interval or 1

    def detached(self) -> EventDraft:
        """Return a copy stripped of every repeat field."""
        return self.model_copy(
            update={
                "repeat_type": RepeatType.NONE,
                "repeat_interval": None,
                "repeat_until": None,
                "repeat_group_id": None,
                "repeat_weekday": None,
                "repeat_week_of_month": None,
            }
        )


class Event(EventDraft):
    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @classmethod
    def from_draft(cls, draft: EventDraft, **overrides) -> Event:
        data = draft.model_dump()
        data.update(overrides)
        return cls(**data)

    def same_series_fallback(self, other: EventDraft) -> bool:
        """Best-effort grouping for legacy rows saved without a repeat_group_id.

        Two unrelated events may share all three fields; treat the result as a
        guess, never as an invariant.
        """
        return (
            self.title == other.title
            and self.repeat_type == other.repeat_type
            and self.repeat_until == other.repeat_until
        )


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class CollisionCandidate(_CamelModel):
    room_id: str | None = None
    start_date: date
    end_date: date
    start_time: str = Field(pattern=_HHMM)
    end_time: str = Field(pattern=_HHMM)

    @model_validator(mode="after")
    def _check_ranges(self) -> CollisionCandidate:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.start_date == self.end_date and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def is_all_day(self) -> bool:
        return self.start_time == ALL_DAY_START and self.end_time == ALL_DAY_END

    @classmethod
    def from_event(cls, event: EventDraft) -> CollisionCandidate:
        return cls(
            room_id=event.room_id,
            start_date=event.start_date,
            end_date=event.end_date,
            start_time=event.start_time,
            end_time=event.end_time,
        )


class CollisionCheckRequest(_CamelModel):
    candidate: CollisionCandidate
    exclude_id: str | None = None


class SaveResponse(_CamelModel):
    events: list[Event]
    collisions: list[Event] = Field(default_factory=list)


class DeleteResponse(_CamelModel):
    deleted: list[str]


class CalendarDay(_CamelModel):
    day: date
    rooms: dict[str, list[Event]] = Field(default_factory=dict)
