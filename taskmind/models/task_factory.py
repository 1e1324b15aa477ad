"""Task creation factory for TaskMind.

This module centralizes how raw request values become Task objects. Date
strings from forms and date pickers are normalized here, exactly once per
write, and status changes are checked against the task lifecycle.
"""

import uuid
from datetime import datetime, tzinfo
from typing import Optional, Dict, Any

from taskmind.models.task import Task, TaskStatus, TaskPriority
from taskmind.models.constants import DEFAULT_TASK_STATUS, DEFAULT_TASK_PRIORITY
from taskmind.temporal.normalizer import APP_TIMEZONE, TimePoint, parse_field
from taskmind.temporal.status import as_task_status, ensure_transition

# Fields that cannot be cleared by sending null in an update
_NON_NULLABLE_FIELDS = ("title", "priority", "status")


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary."""
    return {
        "description": None,
        "subject": None,
        "due_at": None,
        "priority": DEFAULT_TASK_PRIORITY,
        "status": DEFAULT_TASK_STATUS,
        "color": None,
        "grade": None,
    }


def create_task_base(
    user_id: str,
    title: str,
    *,
    now: TimePoint,
    description: Optional[str] = None,
    subject: Optional[str] = None,
    due_at: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    status: Optional[TaskStatus] = None,
    color: Optional[str] = None,
    grade: Optional[float] = None,
    tz: tzinfo = APP_TIMEZONE,
) -> Task:
    """Create a task from raw request values, applying defaults.

    Args:
        user_id: User ID who owns this task (required)
        title: Task title (required)
        now: Current instant; becomes ``completed_at`` if created completed
        description: Task description
        subject: Course subject
        due_at: Raw due date string in any accepted format (None/blank for no due date)
        priority: Task priority (defaults to medium)
        status: Initial stored status (defaults to pending)
        color: Display color
        grade: Grade received
        tz: Zone for due dates given without an offset

    Returns:
        Task object with defaults applied

    Raises:
        InvalidTemporalInput: If ``due_at`` is not a recognizable date
    """
    defaults = create_task_defaults()
    due = parse_field("due_at", due_at, tz)
    status_value = as_task_status(status) if status is not None else defaults["status"]
    created = datetime.utcnow()

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        description=description if description is not None else defaults["description"],
        subject=subject if subject is not None else defaults["subject"],
        due_at=due,
        priority=priority if priority is not None else defaults["priority"],
        status=status_value,
        color=color if color is not None else defaults["color"],
        grade=grade if grade is not None else defaults["grade"],
        completed_at=now if status_value == TaskStatus.COMPLETED else None,
        created_at=created,
        updated_at=created,
    )


def apply_task_update(
    task: Task,
    changes: Dict[str, Any],
    *,
    now: TimePoint,
    tz: tzinfo = APP_TIMEZONE,
) -> Task:
    """Return a copy of ``task`` with ``changes`` applied.

    ``changes`` holds only the fields the caller sent. A ``due_at`` key is
    re-parsed from its raw string (null clears the due date). Moving to
    completed stamps ``completed_at``; any other status clears it.

    Raises:
        InvalidTemporalInput: If ``due_at`` is not a recognizable date
        InvalidStatusTransition: If the status change is not allowed
    """
    updates = {k: v for k, v in changes.items() if not (k in _NON_NULLABLE_FIELDS and v is None)}

    if "due_at" in updates:
        updates["due_at"] = parse_field("due_at", updates["due_at"], tz)

    if "status" in updates:
        current = as_task_status(task.status)
        target = as_task_status(updates["status"])
        ensure_transition(current, target)
        updates["status"] = target
        if target != TaskStatus.COMPLETED:
            updates["completed_at"] = None
        elif current != TaskStatus.COMPLETED:
            updates["completed_at"] = now

    updates["updated_at"] = datetime.utcnow()
    return Task(**{**task.model_dump(), **updates})


def complete_task(task: Task, *, now: TimePoint, grade: Optional[float] = None) -> Task:
    """Mark a task completed, optionally recording the grade received."""
    changes: Dict[str, Any] = {"status": TaskStatus.COMPLETED}
    if grade is not None:
        changes["grade"] = grade
    return apply_task_update(task, changes, now=now)
