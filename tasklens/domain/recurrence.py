from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from .dates import js_weekday, parse_date, to_date
from .entities import TaskEntity
from .enums import RecurrenceRule, RecurrenceStatus


@dataclass(frozen=True)
class RecurrenceResult:
    status: RecurrenceStatus
    next_due: Optional[datetime | date] = None


def _anchor(task: TaskEntity) -> datetime | date | None:
    value = task.due_date
    if isinstance(value, (date, datetime)):
        return value
    parsed = parse_date(value)
    if parsed is None:
        return None
    # Date-only strings stay dates.
    if isinstance(value, str) and "T" not in value and " " not in value.strip():
        return parsed.date()
    return parsed


def evaluate_recurrence(task: TaskEntity) -> RecurrenceResult:
    config = task.recurring
    if config is None or not config.enabled:
        return RecurrenceResult(RecurrenceStatus.NOT_RECURRING)

    anchor = _anchor(task)
    if anchor is None:
        return RecurrenceResult(RecurrenceStatus.NOT_RECURRING)

    next_due = _next_due_date(anchor, config.frequency, config.step, config.days_of_week)
    if next_due is None:
        return RecurrenceResult(RecurrenceStatus.UNSUPPORTED)

    end = to_date(config.end_date)
    if end is not None and _as_date(next_due) > end:
        return RecurrenceResult(RecurrenceStatus.ENDED)
    return RecurrenceResult(RecurrenceStatus.SCHEDULED, next_due)


def next_occurrence(task: TaskEntity) -> datetime | date | None:
    """Next due date of a recurring task, or None when there is none."""
    return evaluate_recurrence(task).next_due


def _weekdays(days_of_week) -> list[int]:
    """Valid Sunday=0 weekday indices; entries that are not integers 0..6 are dropped."""
    days = set()
    for day in days_of_week or ():
        try:
            value = int(day)
        except (TypeError, ValueError):
            continue
        if 0 <= value <= 6:
            days.add(value)
    return sorted(days)


def _next_due_date(current, rule: str, interval: int, days_of_week) -> datetime | date | None:
    days = _weekdays(days_of_week)

    if rule == RecurrenceRule.DAILY.value:
        return current + timedelta(days=interval)
    if rule in (RecurrenceRule.WEEKLY.value, RecurrenceRule.CUSTOM.value) and days:
        return current + timedelta(days=_weekday_offset(js_weekday(_as_date(current)), days, interval))
    if rule == RecurrenceRule.WEEKLY.value:
        return current + timedelta(weeks=interval)
    if rule == RecurrenceRule.MONTHLY.value:
        return add_months(current, interval)
    if rule == RecurrenceRule.YEARLY.value:
        return add_months(current, interval * 12)
    return None


def _weekday_offset(weekday: int, days: list[int], interval: int) -> int:
    later = [day for day in days if day > weekday]
    if later:
        return later[0] - weekday
    return 7 * interval - weekday + days[0]


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def add_months(base, months: int):
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)
