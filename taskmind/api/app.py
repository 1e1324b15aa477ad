"""FastAPI web application for TaskMind."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from taskmind.api.schemas import (
    CalendarResponse,
    DashboardEvents,
    DashboardResponse,
    DashboardTasks,
    EventCreateRequest,
    EventListResponse,
    EventResponse,
    EventUpdateRequest,
    EventView,
    PerformanceResponse,
    ProfileUpdateRequest,
    StatusBadge,
    TaskCompleteRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
    TaskView,
    UserResponse,
    UserView,
)
from taskmind.auth.dependencies import get_current_user
from taskmind.database.database import get_db
from taskmind.database.event_repository import EventRepository
from taskmind.database.repository import TaskRepository
from taskmind.database.user_repository import UserRepository
from taskmind.engine.dashboard import monthly_performance, overall_progress, task_statistics
from taskmind.models.constants import (
    DASHBOARD_LIST_LIMIT,
    DEFAULT_PERFORMANCE_MONTHS,
    FALLBACK_COLOR,
    MAX_PERFORMANCE_MONTHS,
    PRIORITY_COLORS,
    STATUS_BADGES,
)
from taskmind.models.event import Event, EventValidationError
from taskmind.models.event_factory import apply_event_update, create_event_base
from taskmind.models.task import EffectiveStatus, Task, TaskPriority
from taskmind.models.task_factory import apply_task_update, complete_task, create_task_base
from taskmind.models.user import User
from taskmind.temporal.normalizer import (
    DEFAULT_DISPLAY_LOCALE,
    InvalidTemporalInput,
    TimePoint,
    month_bounds,
    now as current_time,
    parse_field,
    to_display_string,
    to_storage_string,
)
from taskmind.temporal.status import InvalidStatusTransition, as_task_status, days_remaining, resolve

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Initialize FastAPI app
app = FastAPI(
    title="TaskMind API",
    description="Tracks students' tasks, calendar events and performance",
    version=VERSION,
)


# Error handlers

@app.exception_handler(InvalidTemporalInput)
async def invalid_temporal_input_handler(request: Request, exc: InvalidTemporalInput):
    """Reject the offending date field; the rest of the write is not applied."""
    logger.info(f"Rejected date input on {request.url.path}: field={exc.field} value={exc.raw!r}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "field": exc.field, "value": exc.raw},
    )


@app.exception_handler(EventValidationError)
async def event_validation_handler(request: Request, exc: EventValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(InvalidStatusTransition)
async def status_transition_handler(request: Request, exc: InvalidStatusTransition):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "current": exc.current.value, "requested": exc.target.value},
    )


# Serialization helpers

def _storage(value: Optional[TimePoint]) -> Optional[str]:
    return to_storage_string(value) if value is not None else None


def _display(value: Optional[TimePoint]) -> Optional[str]:
    return to_display_string(value, DEFAULT_DISPLAY_LOCALE) if value is not None else None


def _task_view(task: Task, now: TimePoint) -> TaskView:
    effective = resolve(task.status, task.due_at, now)
    priority = TaskPriority(task.priority)
    return TaskView(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        subject=task.subject,
        priority=priority,
        priority_color=PRIORITY_COLORS.get(priority, FALLBACK_COLOR),
        status=as_task_status(task.status),
        effective_status=effective,
        badge=StatusBadge(**STATUS_BADGES[effective]),
        color=task.color,
        grade=task.grade,
        due_at=_storage(task.due_at),
        due_at_display=_display(task.due_at),
        days_remaining=None if effective == EffectiveStatus.COMPLETED else days_remaining(task.due_at, now),
        completed_at=_storage(task.completed_at),
        completed_at_display=_display(task.completed_at),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _event_view(event: Event) -> EventView:
    return EventView(
        id=event.id,
        user_id=event.user_id,
        title=event.title,
        description=event.description,
        event_type=event.event_type,
        color=event.color,
        location=event.location,
        starts_at=to_storage_string(event.starts_at),
        starts_at_display=_display(event.starts_at),
        ends_at=_storage(event.ends_at),
        ends_at_display=_display(event.ends_at),
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def _user_view(user: User) -> UserView:
    return UserView(**user.model_dump(exclude={"created_at", "updated_at"}))


def _get_task_or_404(repo: TaskRepository, user_id: str, task_id: str) -> Task:
    task = repo.get(user_id, task_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return task


def _get_event_or_404(repo: EventRepository, user_id: str, event_id: str) -> Event:
    event = repo.get(user_id, event_id)
    if not event:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return event


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


# Tasks

@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    status_filter: Optional[EffectiveStatus] = Query(None, alias="status"),
    subject: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List tasks ordered by due date.

    ``status`` filters on effective status, so ``status=overdue`` returns late
    unfinished tasks and ``status=pending`` excludes them.
    """
    now = current_time()
    tasks = TaskRepository(db).list(current_user.id, subject=subject, priority=priority)
    views = [_task_view(task, now) for task in tasks]
    if status_filter is not None:
        views = [view for view in views if view.effective_status == status_filter]
    return TaskListResponse(tasks=views, count=len(views))


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a task. An unrecognizable ``due_at`` is rejected with 400."""
    now = current_time()
    task = create_task_base(
        user_id=current_user.id,
        title=request.title,
        now=now,
        description=request.description,
        subject=request.subject,
        due_at=request.due_at,
        priority=request.priority,
        status=request.status,
        color=request.color,
        grade=request.grade,
    )
    created = TaskRepository(db).create(task)
    return TaskResponse(task=_task_view(created, now))


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a single task."""
    task = _get_task_or_404(TaskRepository(db), current_user.id, task_id)
    return TaskResponse(task=_task_view(task, current_time()))


@app.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the fields sent; the due date is re-normalized when present."""
    repo = TaskRepository(db)
    task = _get_task_or_404(repo, current_user.id, task_id)
    now = current_time()
    updated = apply_task_update(task, request.model_dump(exclude_unset=True), now=now)
    return TaskResponse(task=_task_view(repo.update(updated), now))


@app.patch("/tasks/{task_id}/complete", response_model=TaskResponse)
def mark_task_completed(
    task_id: str,
    request: Optional[TaskCompleteRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Mark a task completed, optionally recording its grade."""
    repo = TaskRepository(db)
    task = _get_task_or_404(repo, current_user.id, task_id)
    now = current_time()
    grade = request.grade if request else None
    return TaskResponse(task=_task_view(repo.update(complete_task(task, now=now, grade=grade)), now))


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a task."""
    if not TaskRepository(db).delete(current_user.id, task_id):
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Events

@app.get("/events", response_model=EventListResponse)
def list_events(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List events ordered by start."""
    events = [_event_view(event) for event in EventRepository(db).list(current_user.id)]
    return EventListResponse(events=events, count=len(events))


@app.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a calendar event."""
    event = create_event_base(
        user_id=current_user.id,
        title=request.title,
        starts_at=request.starts_at,
        ends_at=request.ends_at,
        description=request.description,
        event_type=request.event_type,
        color=request.color,
        location=request.location,
    )
    return EventResponse(event=_event_view(EventRepository(db).create(event)))


@app.get("/events/{event_id}", response_model=EventResponse)
def get_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a single event."""
    return EventResponse(event=_event_view(_get_event_or_404(EventRepository(db), current_user.id, event_id)))


@app.put("/events/{event_id}", response_model=EventResponse)
def update_event(
    event_id: str,
    request: EventUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the fields sent; dates are re-normalized when present."""
    repo = EventRepository(db)
    event = _get_event_or_404(repo, current_user.id, event_id)
    updated = apply_event_update(event, request.model_dump(exclude_unset=True))
    return EventResponse(event=_event_view(repo.update(updated)))


@app.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete an event."""
    if not EventRepository(db).delete(current_user.id, event_id):
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Dashboard

@app.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Summary: status counts, next and late tasks, next events, this month's performance."""
    now = current_time()
    task_repo = TaskRepository(db)
    tasks = task_repo.list(current_user.id)

    return DashboardResponse(
        statistics=task_statistics(tasks, now),
        tasks=DashboardTasks(
            upcoming=[_task_view(t, now) for t in task_repo.list_upcoming(current_user.id, now, DASHBOARD_LIST_LIMIT)],
            overdue=[_task_view(t, now) for t in task_repo.list_overdue(current_user.id, now, DASHBOARD_LIST_LIMIT)],
        ),
        events=DashboardEvents(
            upcoming=[_event_view(e) for e in EventRepository(db).list_upcoming(current_user.id, now, DASHBOARD_LIST_LIMIT)],
        ),
        monthly_performance=monthly_performance(tasks, now, months=1)[0],
    )


@app.get("/dashboard/calendar", response_model=CalendarResponse)
def get_calendar(
    start: Optional[str] = Query(None, description="Range start in any accepted date format"),
    end: Optional[str] = Query(None, description="Range end in any accepted date format"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Events and tasks within [start, end]. Missing bounds default to the current month."""
    default_start, next_month = month_bounds(current_time())
    # Both bounds are inclusive; stop at the last whole second of this month.
    default_end = next_month - timedelta(seconds=1)
    range_start = parse_field("start", start) or default_start
    range_end = parse_field("end", end) or default_end
    if range_end < range_start:
        raise HTTPException(status_code=400, detail="Calendar range end must not be before its start")

    now = current_time()
    events = EventRepository(db).list_between(current_user.id, range_start, range_end)
    tasks = TaskRepository(db).list_due_between(current_user.id, range_start, range_end)
    return CalendarResponse(
        start=to_storage_string(range_start),
        end=to_storage_string(range_end),
        events=[_event_view(e) for e in events],
        tasks=[_task_view(t, now) for t in tasks],
    )


@app.post("/dashboard/calendar", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_calendar_event(
    request: EventCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an event from the calendar screen (same as POST /events)."""
    return create_event(request, current_user=current_user, db=db)


@app.get("/dashboard/performance", response_model=PerformanceResponse)
def get_performance(
    months: int = Query(DEFAULT_PERFORMANCE_MONTHS, ge=1, le=MAX_PERFORMANCE_MONTHS),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Monthly performance history (newest first) and all-time progress."""
    tasks = TaskRepository(db).list(current_user.id)
    return PerformanceResponse(
        history=monthly_performance(tasks, current_time(), months=months),
        overall=overall_progress(tasks),
    )


# Profile

@app.get("/users/me", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    """Current user's profile."""
    return UserResponse(user=_user_view(current_user))


@app.put("/users/me", response_model=UserResponse)
def update_profile(
    request: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update profile fields sent; ``birth_date`` accepts any accepted date format."""
    changes = request.model_dump(exclude_unset=True)
    if "birth_date" in changes:
        birth = parse_field("birth_date", changes["birth_date"])
        changes["birth_date"] = birth.date() if birth is not None else None
    changes["updated_at"] = datetime.utcnow()

    updated = UserRepository(db).create_or_update(User(**{**current_user.model_dump(), **changes}))
    return UserResponse(user=_user_view(updated))
