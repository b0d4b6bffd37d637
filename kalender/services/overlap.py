"""Half-open interval overlap with the venue's all-day override."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import NamedTuple

from kalender.domain.models import ALL_DAY_END, ALL_DAY_START


def parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


class Span(NamedTuple):
    """One concrete occurrence on the wall clock."""

    start: datetime
    end: datetime
    all_day: bool = False

    @classmethod
    def build(
        cls, start_date: date, end_date: date, start_time: str, end_time: str
    ) -> Span:
        return cls(
            start=datetime.combine(start_date, parse_hhmm(start_time)),
            end=datetime.combine(end_date, parse_hhmm(end_time)),
            all_day=start_time == ALL_DAY_START and end_time == ALL_DAY_END,
        )

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open overlap test.

    ``a_start < b_end and b_start < a_end``; spans that merely touch
    (``a_end == b_start``) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def dates_intersect(a: Span, b: Span) -> bool:
    return a.start_date <= b.end_date and b.start_date <= a.end_date


def spans_collide(a: Span, b: Span) -> bool:
    """Return whether two occurrences block each other.

    An all-day booking blocks the room outright: it collides with any other
    span sharing one of its dates, whatever the other span's hours.
    """
    if a.all_day or b.all_day:
        return dates_intersect(a, b)
    return overlaps(a.start, a.end, b.start, b.end)
