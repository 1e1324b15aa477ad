"""Date/time normalization and derived status for TaskMind records."""

from taskmind.temporal.normalizer import (
    APP_TIMEZONE,
    DEFAULT_DISPLAY_LOCALE,
    InvalidTemporalInput,
    TimePoint,
    month_bounds,
    now,
    parse,
    parse_field,
    to_display_string,
    to_storage_string,
)
from taskmind.temporal.status import (
    InvalidStatusTransition,
    can_transition,
    days_remaining,
    ensure_transition,
    is_overdue,
    resolve,
)

__all__ = [
    "APP_TIMEZONE",
    "DEFAULT_DISPLAY_LOCALE",
    "InvalidTemporalInput",
    "TimePoint",
    "month_bounds",
    "now",
    "parse",
    "parse_field",
    "to_display_string",
    "to_storage_string",
    "InvalidStatusTransition",
    "can_transition",
    "days_remaining",
    "ensure_transition",
    "is_overdue",
    "resolve",
]
