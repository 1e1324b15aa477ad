"""Date/time normalization for TaskMind.

Every date/time value that enters or leaves the record store passes through
this module. Values arrive from two producers: date pickers emitting ISO-8601
and legacy free-text fields using the Brazilian DD/MM/YYYY convention. Formats
are tried in a fixed order and the first full match wins; anything else is
rejected with InvalidTemporalInput rather than guessed.

A TimePoint is a timezone-aware datetime expressed in the application zone.
"""

import os
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# Application time zone. There is no per-user zone; everything is stored and
# displayed in this one.
APP_TIMEZONE_NAME = os.getenv("TASKMIND_TIMEZONE", "America/Sao_Paulo")
APP_TIMEZONE: tzinfo = ZoneInfo(APP_TIMEZONE_NAME)

DEFAULT_DISPLAY_LOCALE = os.getenv("TASKMIND_DISPLAY_LOCALE", "pt_BR")

TimePoint = datetime


class InvalidTemporalInput(ValueError):
    """A non-empty date/time value that matches none of the accepted formats.

    Callers reject the offending field instead of substituting a default.
    """

    def __init__(self, raw: str, *, field: Optional[str] = None, reason: Optional[str] = None):
        self.raw = raw
        self.field = field
        self.reason = reason
        if field:
            message = f"Invalid date/time for '{field}': {raw!r}"
        else:
            message = f"Invalid date/time: {raw!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


_ISO_8601 = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[T ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,6}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})?",
    re.ASCII,
)
_BR_DATETIME = re.compile(
    r"(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4}) (?P<hour>\d{2}):(?P<minute>\d{2})",
    re.ASCII,
)
_BR_DATE = re.compile(r"(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4})", re.ASCII)
_ISO_DATE = re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})", re.ASCII)

# Priority order matters: ISO first so day/month-ambiguous strings from the
# date picker are never read as DD/MM.
ACCEPTED_FORMATS: List[Tuple[str, re.Pattern]] = [
    ("YYYY-MM-DDTHH:mm:ss[.sss][Z|+HH:mm]", _ISO_8601),
    ("DD/MM/YYYY HH:mm", _BR_DATETIME),
    ("DD/MM/YYYY", _BR_DATE),
    ("YYYY-MM-DD", _ISO_DATE),
]


def _parse_offset(raw: str, offset: str) -> tzinfo:
    if offset == "Z":
        return timezone.utc
    hours = int(offset[1:3])
    minutes = int(offset[4:6])
    if hours > 23 or minutes > 59:
        raise InvalidTemporalInput(raw, reason="UTC offset out of range")
    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if offset[0] == "-" else delta)


def _build(raw: str, match: re.Match, tz: tzinfo) -> TimePoint:
    parts = match.groupdict()
    fraction = parts.get("fraction") or ""
    try:
        value = datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts.get("hour") or 0),
            int(parts.get("minute") or 0),
            int(parts.get("second") or 0),
            int(fraction.ljust(6, "0")) if fraction else 0,
        )
    except ValueError as e:
        # datetime() refuses 31/02 and 25:00 instead of rolling over.
        raise InvalidTemporalInput(raw, reason=str(e)) from e

    offset = parts.get("offset")
    if offset is None:
        return value.replace(tzinfo=tz)
    return value.replace(tzinfo=_parse_offset(raw, offset)).astimezone(tz)


def parse(raw: Optional[str], tz: tzinfo = APP_TIMEZONE) -> Optional[TimePoint]:
    """Parse a textual date/time into a TimePoint.

    Args:
        raw: Value supplied by a form field or date picker
        tz: Zone used for values without an explicit offset

    Returns:
        TimePoint in ``tz``, or None when ``raw`` is None or blank

    Raises:
        InvalidTemporalInput: If ``raw`` is non-empty and no accepted format
            matches it exactly, or it names an impossible date/time
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TypeError(f"Expected a string date/time, got {type(raw).__name__}")

    text = raw.strip()
    if not text:
        return None

    for _, pattern in ACCEPTED_FORMATS:
        match = pattern.fullmatch(text)
        if match:
            return _build(raw, match, tz)

    raise InvalidTemporalInput(raw, reason="expected one of: " + ", ".join(name for name, _ in ACCEPTED_FORMATS))


def parse_field(field: str, raw: Optional[str], tz: tzinfo = APP_TIMEZONE) -> Optional[TimePoint]:
    """Like parse(), but tags a failure with the name of the offending field."""
    try:
        return parse(raw, tz)
    except InvalidTemporalInput as e:
        raise InvalidTemporalInput(e.raw, field=field, reason=e.reason) from e


def to_storage_string(t: TimePoint, tz: tzinfo = APP_TIMEZONE) -> str:
    """Render ``YYYY-MM-DD HH:mm:ss`` in the application zone (persistence only)."""
    local = t.astimezone(tz)
    return (
        f"{local.year:04d}-{local.month:02d}-{local.day:02d} "
        f"{local.hour:02d}:{local.minute:02d}:{local.second:02d}"
    )


def _display_pt_br(local: datetime) -> str:
    return f"{local.day:02d}/{local.month:02d}/{local.year:04d} {local.hour:02d}:{local.minute:02d}"


def _display_en_us(local: datetime) -> str:
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.month:02d}/{local.day:02d}/{local.year:04d} {hour:02d}:{local.minute:02d} {suffix}"


DISPLAY_FORMATTERS: Dict[str, Callable[[datetime], str]] = {
    "pt_BR": _display_pt_br,
    "en_US": _display_en_us,
}


def to_display_string(
    t: TimePoint,
    locale: str = DEFAULT_DISPLAY_LOCALE,
    tz: tzinfo = APP_TIMEZONE,
) -> str:
    """Render a TimePoint for people to read.

    Display strings are not round-trippable and must never be stored or
    compared; use to_storage_string() for that.
    """
    formatter = DISPLAY_FORMATTERS.get(locale)
    if formatter is None:
        raise ValueError(f"Unsupported display locale: {locale!r}")
    return formatter(t.astimezone(tz))


def now(tz: tzinfo = APP_TIMEZONE) -> TimePoint:
    """Current instant in the application zone, truncated to whole seconds.

    Storage strings have one-second resolution, so SQL range filters and
    resolve() must compare against the same instant.
    """
    return datetime.now(tz).replace(microsecond=0)


def month_bounds(t: TimePoint, tz: tzinfo = APP_TIMEZONE) -> Tuple[TimePoint, TimePoint]:
    """Return the first instant of t's month and of the following month."""
    local = t.astimezone(tz)
    start = datetime(local.year, local.month, 1, tzinfo=tz)
    if local.month == 12:
        end = datetime(local.year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(local.year, local.month + 1, 1, tzinfo=tz)
    return start, end
