"""Service for deciding which calendar days a (possibly recurring) event covers
and for stepping a recurring event through its concrete occurrences."""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta, weekday

from kalender.domain.models import EventDraft, RepeatType

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 100


def _week_of_month(day: date) -> int:
    return math.ceil(day.day / 7)


def occurs_on_day(event: EventDraft, day: date) -> bool:
    """Return whether *event* has an occurrence starting on *day*.

    Non-recurring events cover every day of their inclusive date range.
    Recurring events only match on days where the repeat rule fires, and never
    after ``repeat_until`` or before ``start_date``.

    ``monthly_weekday`` derives the week of the month from ``ceil(day / 7)``
    rather than from the stored ``repeat_week_of_month``. The materializer
    walks to the Nth weekday counted from the 1st instead, so the two can
    disagree in months that do not start on the target weekday.
    """
    if event.repeat_type == RepeatType.NONE:
        return event.start_date <= day <= event.end_date

    if event.repeat_until is not None and day > event.repeat_until:
        return False
    if day < event.start_date:
        return False

    delta = (day - event.start_date).days
    start = event.start_date

    if event.repeat_type == RepeatType.DAILY:
        horizon = event.repeat_until or event.end_date
        return day <= horizon and delta % event.interval == 0

    if event.repeat_type == RepeatType.WEEKLY:
        return day.weekday() == start.weekday() and (delta // 7) % event.interval == 0

    if event.repeat_type == RepeatType.MONTHLY:
        return day.day == start.day

    if event.repeat_type == RepeatType.MONTHLY_WEEKDAY:
        if event.repeat_weekday is None or event.repeat_week_of_month is None:
            return False
        return day.weekday() == start.weekday() and _week_of_month(
            day
        ) == _week_of_month(start)

    if event.repeat_type == RepeatType.YEARLY:
        return day.day == start.day and day.month == start.month

    logger.debug("Unknown repeat type %r on %r", event.repeat_type, event.title)
    return False


def covers_day(event: EventDraft, day: date) -> bool:
    """Day projection shared by the calendar grid and range filters.

    Only rows whose recurrence was never materialized are projected through
    :func:`occurs_on_day`; materialized rows and horizon-less recurring rows
    are concrete occurrences covering their own date range.
    """
    if event.is_expandable:
        return occurs_on_day(event, day)
    return event.start_date <= day <= event.end_date


def expand_occurrences(
    event: EventDraft, max_occurrences: int = MAX_OCCURRENCES
) -> Iterator[tuple[date, date]]:
    """Yield every ``(start_date, end_date)`` pair of *event*.

    The first pair is always the event's own dates. Recurring events keep
    stepping while the start stays on or before ``repeat_until``; the series is
    silently truncated after *max_occurrences* pairs, or where the next step
    would run past ``date.max``.
    """
    if not event.is_recurring:
        yield event.start_date, event.end_date
        return

    if event.repeat_type not in _STEPPERS:
        logger.debug("Unknown repeat type %r, nothing to expand", event.repeat_type)
        return

    step = _STEPPERS[event.repeat_type]
    span = event.end_date - event.start_date
    current = event.start_date

    for index in range(max_occurrences):
        if current is None or current > event.repeat_until:
            return
        try:
            end = current + span
        except OverflowError:
            logger.debug("%r runs past the last representable date", event.title)
            return
        yield current, end
        try:
            current = step(event, index + 1)
        except (OverflowError, ValueError):
            logger.debug("%r runs past the last representable date", event.title)
            return

    if current is not None and current <= event.repeat_until:
        logger.debug("Truncated %r after %d occurrences", event.title, max_occurrences)


# ---------------------------------------------------------------------------
# Step rules: start date of the nth occurrence, counted from the base date
# ---------------------------------------------------------------------------


def _step_daily(event: EventDraft, n: int) -> date:
    return event.start_date + timedelta(days=n * event.interval)


def _step_weekly(event: EventDraft, n: int) -> date:
    return event.start_date + timedelta(weeks=n * event.interval)


def _step_monthly(event: EventDraft, n: int) -> date:
    # Offsetting from the base keeps a 31st series on the 31st wherever the
    # month has one and clamps to the month's last day elsewhere.
    return event.start_date + relativedelta(months=n * event.interval)


def _step_monthly_weekday(event: EventDraft, n: int) -> date | None:
    if event.repeat_weekday is None or event.repeat_week_of_month is None:
        return None
    target = weekday(event.repeat_weekday - 1)
    first_match = event.start_date + relativedelta(
        months=n * event.interval, day=1, weekday=target(+1)
    )
    # A fifth week that does not exist rolls over into the following month.
    return first_match + timedelta(weeks=event.repeat_week_of_month - 1)


def _step_yearly(event: EventDraft, n: int) -> date:
    return event.start_date + relativedelta(years=n * event.interval)


_STEPPERS = {
    RepeatType.DAILY: _step_daily,
    RepeatType.WEEKLY: _step_weekly,
    RepeatType.MONTHLY: _step_monthly,
    RepeatType.MONTHLY_WEEKDAY: _step_monthly_weekday,
    RepeatType.YEARLY: _step_yearly,
}
