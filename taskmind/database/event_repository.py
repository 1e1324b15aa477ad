"""Repository for calendar Event database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import asc

from taskmind.models.event import Event
from taskmind.database.models import EventDB, now_to_column, time_point_to_column
from taskmind.temporal.normalizer import TimePoint

logger = logging.getLogger(__name__)


class EventRepository:
    """Repository for Event database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, event: Event) -> Event:
        """Create a new event."""
        try:
            event_db = EventDB.from_pydantic(event)
            self.db.add(event_db)
            self.db.commit()
            self.db.refresh(event_db)
            logger.debug(f"Created event {event.id}: {event.title[:50]}")
            return event_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create event {event.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, event_id: str) -> Optional[Event]:
        """Get event by ID for a specific user."""
        event_db = self.db.query(EventDB).filter(
            EventDB.id == event_id,
            EventDB.user_id == user_id,
        ).first()
        return event_db.to_pydantic() if event_db else None

    def list(self, user_id: str) -> List[Event]:
        """All events for a user ordered by start."""
        events_db = self.db.query(EventDB).filter(
            EventDB.user_id == user_id,
        ).order_by(asc(EventDB.starts_at)).all()
        return [event_db.to_pydantic() for event_db in events_db]

    def list_between(self, user_id: str, start: TimePoint, end: TimePoint) -> List[Event]:
        """Events starting within [start, end], inclusive on both ends."""
        events_db = self.db.query(EventDB).filter(
            EventDB.user_id == user_id,
            EventDB.starts_at >= time_point_to_column(start),
            EventDB.starts_at <= time_point_to_column(end),
        ).order_by(asc(EventDB.starts_at)).all()
        return [event_db.to_pydantic() for event_db in events_db]

    def list_upcoming(self, user_id: str, now: TimePoint, limit: int) -> List[Event]:
        """Events starting at or after ``now``, soonest first."""
        events_db = self.db.query(EventDB).filter(
            EventDB.user_id == user_id,
            EventDB.starts_at >= now_to_column(now),
        ).order_by(asc(EventDB.starts_at)).limit(limit).all()
        return [event_db.to_pydantic() for event_db in events_db]

    def update(self, event: Event) -> Event:
        """Update an existing event (user_id must match event.user_id)."""
        event_db = self.db.query(EventDB).filter(
            EventDB.id == event.id,
            EventDB.user_id == event.user_id,
        ).first()
        if not event_db:
            raise ValueError(f"Event {event.id} not found")

        event_db.title = event.title
        event_db.description = event.description
        event_db.starts_at = time_point_to_column(event.starts_at)
        event_db.ends_at = time_point_to_column(event.ends_at)
        event_db.event_type = event.event_type
        event_db.color = event.color
        event_db.location = event.location
        event_db.updated_at = event.updated_at

        try:
            self.db.commit()
            self.db.refresh(event_db)
            logger.debug(f"Updated event {event.id}: {event.title[:50]}")
            return event_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update event {event.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, event_id: str) -> bool:
        """Delete an event by ID for a specific user."""
        event_db = self.db.query(EventDB).filter(
            EventDB.id == event_id,
            EventDB.user_id == user_id,
        ).first()
        if not event_db:
            return False

        try:
            self.db.delete(event_db)
            self.db.commit()
            logger.debug(f"Deleted event {event_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete event {event_id}: {type(e).__name__}: {str(e)}")
            raise
