"""Derived task status.

``overdue`` is not a storage state. It is computed from the stored status and
the due instant every time a task is read, so nothing has to flip a flag when
a deadline passes. Stored transitions are explicit user actions and are
checked here before a write.
"""

from typing import Dict, Optional, Set, Union

from taskmind.models.task import EffectiveStatus, TaskStatus
from taskmind.temporal.normalizer import TimePoint

SECONDS_PER_DAY = 86400

_ALLOWED_TRANSITIONS: Dict[TaskStatus, Set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.PENDING},
    TaskStatus.COMPLETED: set(),
}


class InvalidStatusTransition(ValueError):
    """A stored status change that the task lifecycle does not allow."""

    def __init__(self, current: TaskStatus, target: TaskStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change task status from '{current.value}' to '{target.value}'")


def as_task_status(value: Union[str, TaskStatus]) -> TaskStatus:
    """Coerce a stored status (enum or its string value) to TaskStatus."""
    return TaskStatus(getattr(value, "value", value))


def resolve(
    stored_status: Union[str, TaskStatus],
    due_or_start: Optional[TimePoint],
    now: TimePoint,
) -> EffectiveStatus:
    """Compute the status a user should see for a task.

    Completed is terminal regardless of the due date. A task with no due
    date cannot be overdue. Otherwise a due instant strictly before ``now``
    makes it overdue.
    """
    status = as_task_status(stored_status)
    if status == TaskStatus.COMPLETED:
        return EffectiveStatus.COMPLETED
    if due_or_start is None:
        return EffectiveStatus(status.value)
    if due_or_start < now:
        return EffectiveStatus.OVERDUE
    return EffectiveStatus(status.value)


def is_overdue(
    stored_status: Union[str, TaskStatus],
    due_or_start: Optional[TimePoint],
    now: TimePoint,
) -> bool:
    return resolve(stored_status, due_or_start, now) == EffectiveStatus.OVERDUE


def days_remaining(due_or_start: Optional[TimePoint], now: TimePoint) -> Optional[int]:
    """Whole days until the due instant, negative once it has passed.

    Partial days are truncated toward zero, so something due in 30 hours is
    1 day away and something 30 hours late is -1.
    """
    if due_or_start is None:
        return None
    return int((due_or_start - now).total_seconds() / SECONDS_PER_DAY)


def can_transition(current: Union[str, TaskStatus], target: Union[str, TaskStatus]) -> bool:
    """Whether storage allows moving a task from ``current`` to ``target``.

    Writing the same status again is always allowed.
    """
    current_status = as_task_status(current)
    target_status = as_task_status(target)
    return current_status == target_status or target_status in _ALLOWED_TRANSITIONS[current_status]


def ensure_transition(current: Union[str, TaskStatus], target: Union[str, TaskStatus]) -> None:
    """Raise InvalidStatusTransition unless can_transition() allows the change."""
    if not can_transition(current, target):
        raise InvalidStatusTransition(as_task_status(current), as_task_status(target))
