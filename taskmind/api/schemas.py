"""Request/response models for the TaskMind API.

Dates come in as strings in any format the temporal normalizer accepts and
go out twice: as a storage string (sortable, round-trippable) and as a
display string (for people only).
"""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskmind.models.task import EffectiveStatus, TaskPriority, TaskStatus
from taskmind.models.performance import MonthlyPerformance, OverallProgress, TaskStatistics


# Requests

class TaskCreateRequest(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., min_length=1, description="Task title")
    description: Optional[str] = None
    subject: Optional[str] = Field(None, description="Course subject")
    due_at: Optional[str] = Field(
        None,
        description="Due date: ISO-8601, DD/MM/YYYY HH:mm, DD/MM/YYYY or YYYY-MM-DD",
    )
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    color: Optional[str] = None
    grade: Optional[float] = None


class TaskUpdateRequest(BaseModel):
    """Request model for updating a task. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    subject: Optional[str] = None
    due_at: Optional[str] = Field(None, description="New due date; null clears it")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    color: Optional[str] = None
    grade: Optional[float] = None


class TaskCompleteRequest(BaseModel):
    """Request model for marking a task completed."""
    grade: Optional[float] = Field(None, description="Grade received for the task")


class EventCreateRequest(BaseModel):
    """Request model for creating a calendar event."""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    starts_at: str = Field(..., description="Start date/time in any accepted format")
    ends_at: Optional[str] = None
    event_type: Optional[str] = None
    color: Optional[str] = None
    location: Optional[str] = None


class EventUpdateRequest(BaseModel):
    """Request model for updating an event. Only fields sent are changed."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None
    event_type: Optional[str] = None
    color: Optional[str] = None
    location: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Request model for updating the current user's profile."""
    name: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1)
    birth_date: Optional[str] = Field(None, description="DD/MM/YYYY or YYYY-MM-DD")
    phone: Optional[str] = None


# Responses

class StatusBadge(BaseModel):
    """Presentation hint for an effective status."""
    label: str
    color: str
    icon: str


class TaskView(BaseModel):
    """Task as returned to clients."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    priority: TaskPriority
    priority_color: str
    status: TaskStatus
    effective_status: EffectiveStatus
    badge: StatusBadge
    color: Optional[str] = None
    grade: Optional[float] = None
    due_at: Optional[str] = Field(None, description="YYYY-MM-DD HH:mm:ss")
    due_at_display: Optional[str] = None
    days_remaining: Optional[int] = Field(None, description="Whole days until due; null once completed")
    completed_at: Optional[str] = None
    completed_at_display: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EventView(BaseModel):
    """Event as returned to clients."""
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    event_type: Optional[str] = None
    color: Optional[str] = None
    location: Optional[str] = None
    starts_at: str
    starts_at_display: str
    ends_at: Optional[str] = None
    ends_at_display: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskResponse(BaseModel):
    """Response wrapping a single task."""
    task: TaskView


class TaskListResponse(BaseModel):
    """Response for task listings."""
    tasks: List[TaskView]
    count: int


class EventResponse(BaseModel):
    """Response wrapping a single event."""
    event: EventView


class EventListResponse(BaseModel):
    """Response for event listings."""
    events: List[EventView]
    count: int


class DashboardTasks(BaseModel):
    upcoming: List[TaskView]
    overdue: List[TaskView]


class DashboardEvents(BaseModel):
    upcoming: List[EventView]


class DashboardResponse(BaseModel):
    """Response for the dashboard summary."""
    statistics: TaskStatistics
    tasks: DashboardTasks
    events: DashboardEvents
    monthly_performance: MonthlyPerformance


class CalendarResponse(BaseModel):
    """Events and tasks within a date range."""
    start: str
    end: str
    events: List[EventView]
    tasks: List[TaskView]


class PerformanceResponse(BaseModel):
    """Monthly history plus all-time progress."""
    history: List[MonthlyPerformance]
    overall: OverallProgress


class UserView(BaseModel):
    """User profile as returned to clients."""
    id: str
    email: str
    name: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[int] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None


class UserResponse(BaseModel):
    user: UserView
