"""Data models for TaskMind."""

from taskmind.models.task import Task, TaskStatus, TaskPriority, EffectiveStatus
from taskmind.models.event import Event, EventValidationError
from taskmind.models.user import User
from taskmind.models.performance import TaskStatistics, MonthlyPerformance, OverallProgress

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "EffectiveStatus",
    "Event",
    "EventValidationError",
    "User",
    "TaskStatistics",
    "MonthlyPerformance",
    "OverallProgress",
]
