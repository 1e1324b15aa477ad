"""Task data model for TaskMind."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Stored task status (written only by explicit user action)."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class EffectiveStatus(str, Enum):
    """Status shown to the user. Derived at read time, never persisted."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    """Canonical Task model.

    ``due_at`` and ``completed_at`` are TimePoints (timezone-aware) produced
    by the temporal normalizer.
    """

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    subject: Optional[str] = Field(None, description="Course subject the task belongs to")
    due_at: Optional[datetime] = Field(None, description="Due instant (null if no due date is set)")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(TaskStatus.PENDING, description="Stored task status")
    color: Optional[str] = Field(None, description="Display color chosen by the user")
    grade: Optional[float] = Field(None, description="Grade received for the task")
    completed_at: Optional[datetime] = Field(None, description="Completion instant (only when completed)")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
