"""Service for turning one authored event into the rows that get persisted."""

from __future__ import annotations

import uuid

from kalender.domain.models import EventDraft
from kalender.services.occurrences import MAX_OCCURRENCES, expand_occurrences


def new_repeat_group_id() -> str:
    return f"repeat_{uuid.uuid4().hex}"


def materialize(
    draft: EventDraft, max_occurrences: int = MAX_OCCURRENCES
) -> list[EventDraft]:
    """Expand *draft* into one row per occurrence.

    Non-recurring drafts (or drafts without ``repeat_until``) come back as a
    single-element list, unchanged. Recurring drafts produce one row per
    ``(start_date, end_date)`` pair, all tagged with one fresh
    ``repeat_group_id`` and otherwise identical. Series longer than
    *max_occurrences* are silently truncated.
    """
    if not draft.is_recurring:
        return [draft]

    group_id = new_repeat_group_id()
    return [
        draft.model_copy(
            update={
                "start_date": start_date,
                "end_date": end_date,
                "repeat_group_id": group_id,
            }
        )
        for start_date, end_date in expand_occurrences(draft, max_occurrences)
    ]
