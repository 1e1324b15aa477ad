"""SQLAlchemy database models for TaskMind.

Due/start/end/completion instants are stored as canonical storage strings
(``YYYY-MM-DD HH:mm:ss`` in the application zone) written by the temporal
normalizer, and parsed back through it on read. The fixed-width format sorts
and compares correctly as text.
"""

from datetime import datetime, timedelta
from typing import Optional, Union, TypeVar, Type
import uuid
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, ForeignKey

from taskmind.database.database import Base
from taskmind.models.task import TaskStatus, TaskPriority
from taskmind.temporal.normalizer import TimePoint, parse, to_storage_string

T = TypeVar('T')

STORAGE_STRING_LENGTH = 19


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).
    
    Args:
        enum_obj: Enum instance or string value
        
    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.
    
    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails
        
    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def time_point_to_column(value: Optional[TimePoint]) -> Optional[str]:
    return to_storage_string(value) if value is not None else None


def now_to_column(now: TimePoint) -> str:
    """Storage string for the first whole second not before ``now``.

    A stored instant d is before ``now`` exactly when d < now_to_column(now),
    also when ``now`` carries microseconds.
    """
    if now.microsecond:
        now = now.replace(microsecond=0) + timedelta(seconds=1)
    return to_storage_string(now)


def column_to_time_point(value: Optional[str]) -> Optional[TimePoint]:
    # Stored values were written by to_storage_string(); a parse failure here
    # means the row was corrupted outside the application and must surface.
    return parse(value)


class UserDB(Base):
    """Database model for User."""
    
    __tablename__ = "users"
    
    # Primary key (issued by the external auth service)
    id = Column(String, primary_key=True)
    
    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    course = Column(String, nullable=True)
    semester = Column(Integer, nullable=True)
    birth_date = Column(Date, nullable=True)
    phone = Column(String, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskmind.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            course=self.course,
            semester=self.semester,
            birth_date=self.birth_date,
            phone=self.phone,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
    
    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            course=user.course,
            semester=user.semester,
            birth_date=user.birth_date,
            phone=user.phone,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class TaskDB(Base):
    """Database model for Task."""
    
    __tablename__ = "tasks"
    
    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    
    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    subject = Column(String, nullable=True, index=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value, index=True)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value, index=True)
    color = Column(String, nullable=True)
    grade = Column(Float, nullable=True)
    
    # Temporal fields (canonical storage strings)
    due_at = Column(String(STORAGE_STRING_LENGTH), nullable=True, index=True)
    completed_at = Column(String(STORAGE_STRING_LENGTH), nullable=True)
    
    # Bookkeeping timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskmind.models.task import Task
        
        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            subject=self.subject,
            due_at=column_to_time_point(self.due_at),
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.MEDIUM),
            status=value_to_enum(self.status, TaskStatus, TaskStatus.PENDING),
            color=self.color,
            grade=self.grade,
            completed_at=column_to_time_point(self.completed_at),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
    
    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            subject=task.subject,
            due_at=time_point_to_column(task.due_at),
            priority=enum_to_value(task.priority),
            status=enum_to_value(task.status),
            color=task.color,
            grade=task.grade,
            completed_at=time_point_to_column(task.completed_at),
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class EventDB(Base):
    """Database model for a calendar Event."""

    __tablename__ = "events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    event_type = Column(String, nullable=True)
    color = Column(String, nullable=True)
    location = Column(String, nullable=True)

    starts_at = Column(String(STORAGE_STRING_LENGTH), nullable=False, index=True)
    ends_at = Column(String(STORAGE_STRING_LENGTH), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskmind.models.event import Event
        return Event(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            starts_at=column_to_time_point(self.starts_at),
            ends_at=column_to_time_point(self.ends_at),
            event_type=self.event_type,
            color=self.color,
            location=self.location,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, event):
        """Create database model from Pydantic model."""
        return cls(
            id=event.id,
            user_id=event.user_id,
            title=event.title,
            description=event.description,
            starts_at=time_point_to_column(event.starts_at),
            ends_at=time_point_to_column(event.ends_at),
            event_type=event.event_type,
            color=event.color,
            location=event.location,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )
