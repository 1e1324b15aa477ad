"""Dashboard aggregation engine for TaskMind."""

from taskmind.engine.dashboard import task_statistics, monthly_performance, overall_progress

__all__ = [
    "task_statistics",
    "monthly_performance",
    "overall_progress",
]
