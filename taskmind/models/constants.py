"""Constants for TaskMind.

This module centralizes default values and presentation hints used throughout the application.
"""

import os

from dotenv import load_dotenv

from taskmind.models.task import EffectiveStatus, TaskPriority, TaskStatus

load_dotenv()


# Task defaults
DEFAULT_TASK_STATUS = TaskStatus.PENDING
DEFAULT_TASK_PRIORITY = TaskPriority.MEDIUM

# Dashboard
DASHBOARD_LIST_LIMIT = int(os.getenv("DASHBOARD_LIST_LIMIT", "5"))
DEFAULT_PERFORMANCE_MONTHS = 6
MAX_PERFORMANCE_MONTHS = 24

# Badge shown for each effective status (label, color, icon name)
STATUS_BADGES = {
    EffectiveStatus.PENDING: {"label": "Pendente", "color": "#ff9800", "icon": "clock-outline"},
    EffectiveStatus.IN_PROGRESS: {"label": "Em andamento", "color": "#2196f3", "icon": "progress-clock"},
    EffectiveStatus.COMPLETED: {"label": "Concluída", "color": "#4caf50", "icon": "check-circle"},
    EffectiveStatus.OVERDUE: {"label": "Atrasada", "color": "#f44336", "icon": "alert-circle"},
}

PRIORITY_COLORS = {
    TaskPriority.HIGH: "#f44336",
    TaskPriority.MEDIUM: "#ff9800",
    TaskPriority.LOW: "#4caf50",
}
FALLBACK_COLOR = "#757575"
