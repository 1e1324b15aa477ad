"""Dashboard aggregation for TaskMind.

Counts are taken over effective status, so a pending task whose due date has
passed is counted as overdue rather than pending. Everything here is a pure
function of the task list and ``now``.
"""

from collections import Counter
from datetime import tzinfo
from typing import Dict, Iterable, List, Optional

from taskmind.models.performance import MonthlyPerformance, OverallProgress, TaskStatistics
from taskmind.models.task import EffectiveStatus, Task, TaskStatus
from taskmind.temporal.normalizer import APP_TIMEZONE, TimePoint
from taskmind.temporal.status import as_task_status, resolve


def _average(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def _is_completed(task: Task) -> bool:
    return as_task_status(task.status) == TaskStatus.COMPLETED


def _completed_grades(tasks: Iterable[Task]) -> List[float]:
    return [task.grade for task in tasks if _is_completed(task) and task.grade is not None]


def task_statistics(tasks: List[Task], now: TimePoint) -> TaskStatistics:
    """Count tasks by effective status and average the grades of completed ones."""
    counts = Counter(resolve(task.status, task.due_at, now) for task in tasks)
    return TaskStatistics(
        total=len(tasks),
        completed=counts[EffectiveStatus.COMPLETED],
        pending=counts[EffectiveStatus.PENDING],
        in_progress=counts[EffectiveStatus.IN_PROGRESS],
        overdue=counts[EffectiveStatus.OVERDUE],
        average_grade=_average(_completed_grades(tasks)),
    )


def _month_key(t: TimePoint, tz: tzinfo) -> str:
    local = t.astimezone(tz)
    return f"{local.year:04d}-{local.month:02d}"


def _previous_months(now: TimePoint, months: int, tz: tzinfo) -> List[str]:
    """Month keys from the current month back, newest first."""
    local = now.astimezone(tz)
    year, month = local.year, local.month
    keys: List[str] = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return keys


def monthly_performance(
    tasks: List[Task],
    now: TimePoint,
    months: int,
    tz: tzinfo = APP_TIMEZONE,
) -> List[MonthlyPerformance]:
    """Per-month performance for the last ``months`` months, newest first.

    A task belongs to the month it is due in; tasks without a due date are
    left out of the history.
    """
    by_month: Dict[str, List[Task]] = {}
    for task in tasks:
        if task.due_at is not None:
            by_month.setdefault(_month_key(task.due_at, tz), []).append(task)

    history: List[MonthlyPerformance] = []
    for key in _previous_months(now, months, tz):
        due = by_month.get(key, [])
        completed = [task for task in due if _is_completed(task)]
        overdue = [task for task in due if resolve(task.status, task.due_at, now) == EffectiveStatus.OVERDUE]
        history.append(
            MonthlyPerformance(
                month=key,
                tasks_due=len(due),
                tasks_completed=len(completed),
                tasks_overdue=len(overdue),
                completion_rate=round(len(completed) / len(due), 2) if due else 0.0,
                average_grade=_average(_completed_grades(completed)),
            )
        )
    return history


def overall_progress(tasks: List[Task]) -> OverallProgress:
    """All-time totals across every task, dated or not."""
    return OverallProgress(
        total_tasks=len(tasks),
        completed_tasks=sum(1 for task in tasks if _is_completed(task)),
        average_grade=_average(_completed_grades(tasks)),
    )
