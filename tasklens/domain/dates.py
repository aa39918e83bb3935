"""Date normalization shared by sorting, filtering and recurrence.

Due and end dates arrive from the persistence layer as ISO strings, or as
``date``/``datetime`` objects when built in code. Anything that cannot be
read as a date is treated as absent rather than raised.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from .entities import DateValue, TaskEntity


def _to_naive_utc(value: datetime) -> datetime:
    # Aware values are compared as instants; naive ones are taken as-is.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, the clock stored timestamps use."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date(value: DateValue | None) -> datetime | None:
    """Return a naive datetime for ``value`` or None if it is missing or unparseable.

    Offset-aware values are converted to UTC first.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    return _to_naive_utc(parsed)


def to_date(value: DateValue | None) -> date | None:
    parsed = parse_date(value)
    return parsed.date() if parsed else None


def js_weekday(day: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def is_overdue(task: TaskEntity, today: date | None = None) -> bool:
    if task.completed:
        return False
    due = to_date(task.due_date)
    if due is None:
        return False
    return due < (today or date.today())


def is_due_on(task: TaskEntity, day: date) -> bool:
    return to_date(task.due_date) == day


def is_upcoming(task: TaskEntity, today: date, days: int = 7) -> bool:
    due = to_date(task.due_date)
    if due is None:
        return False
    return today + timedelta(days=1) <= due < today + timedelta(days=days)
