"""Event creation factory for TaskMind."""

import uuid
from datetime import datetime, tzinfo
from typing import Optional, Dict, Any

from taskmind.models.event import Event, EventValidationError
from taskmind.temporal.normalizer import APP_TIMEZONE, TimePoint, parse_field


def _validate_range(starts_at: Optional[TimePoint], ends_at: Optional[TimePoint]) -> None:
    if starts_at is None:
        raise EventValidationError("An event needs a start date", field="starts_at")
    if ends_at is not None and ends_at < starts_at:
        raise EventValidationError("An event cannot end before it starts", field="ends_at")


def create_event_base(
    user_id: str,
    title: str,
    *,
    starts_at: Optional[str],
    ends_at: Optional[str] = None,
    description: Optional[str] = None,
    event_type: Optional[str] = None,
    color: Optional[str] = None,
    location: Optional[str] = None,
    tz: tzinfo = APP_TIMEZONE,
) -> Event:
    """Create an event from raw request values.

    Raises:
        InvalidTemporalInput: If a date is not recognizable
        EventValidationError: If the start is missing or the end precedes it
    """
    start = parse_field("starts_at", starts_at, tz)
    end = parse_field("ends_at", ends_at, tz)
    _validate_range(start, end)

    created = datetime.utcnow()
    return Event(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        description=description,
        starts_at=start,
        ends_at=end,
        event_type=event_type,
        color=color,
        location=location,
        created_at=created,
        updated_at=created,
    )


def apply_event_update(event: Event, changes: Dict[str, Any], *, tz: tzinfo = APP_TIMEZONE) -> Event:
    """Return a copy of ``event`` with ``changes`` applied, re-parsing any dates sent."""
    updates = {k: v for k, v in changes.items() if not (k == "title" and v is None)}
    if "starts_at" in updates:
        updates["starts_at"] = parse_field("starts_at", updates["starts_at"], tz)
    if "ends_at" in updates:
        updates["ends_at"] = parse_field("ends_at", updates["ends_at"], tz)

    _validate_range(updates.get("starts_at", event.starts_at), updates.get("ends_at", event.ends_at))

    updates["updated_at"] = datetime.utcnow()
    return Event(**{**event.model_dump(), **updates})
