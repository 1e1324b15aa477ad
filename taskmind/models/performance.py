"""Dashboard aggregate models for TaskMind."""

from typing import Optional
from pydantic import BaseModel, Field


class TaskStatistics(BaseModel):
    """Task counts by effective status."""
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    overdue: int = 0
    average_grade: Optional[float] = Field(None, description="Mean grade over completed tasks")


class MonthlyPerformance(BaseModel):
    """Performance for the tasks due in one calendar month."""
    month: str = Field(..., description="Month as YYYY-MM")
    tasks_due: int = 0
    tasks_completed: int = 0
    tasks_overdue: int = 0
    completion_rate: float = Field(0.0, description="Completed / due, 0.0 when nothing was due")
    average_grade: Optional[float] = None


class OverallProgress(BaseModel):
    """All-time progress across every task."""
    total_tasks: int = 0
    completed_tasks: int = 0
    average_grade: Optional[float] = None
