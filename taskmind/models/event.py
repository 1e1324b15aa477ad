"""Calendar event data model for TaskMind."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventValidationError(ValueError):
    """Event fields that parse individually but do not make a valid event."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class Event(BaseModel):
    """Calendar event. Events have start/end instants and no status."""

    id: str = Field(..., description="Unique event identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this event")
    title: str = Field(..., description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    starts_at: datetime = Field(..., description="Start instant")
    ends_at: Optional[datetime] = Field(None, description="End instant (null for point-in-time events)")
    event_type: Optional[str] = Field(None, description="Free-form kind, e.g. 'exam' or 'class'")
    color: Optional[str] = Field(None, description="Display color chosen by the user")
    location: Optional[str] = Field(None, description="Where the event takes place")
    created_at: datetime = Field(..., description="Event creation timestamp")
    updated_at: datetime = Field(..., description="Event last update timestamp")
