from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import make_task
from tasklens.domain.entities import RecurrenceConfig
from tasklens.domain.enums import RecurrenceStatus
from tasklens.domain.recurrence import add_months, evaluate_recurrence, next_occurrence

WEDNESDAY = date(2026, 1, 7)


def _recurring(due, **config):
    config.setdefault("enabled", True)
    return make_task("r", due_date=due, recurring=RecurrenceConfig(**config))


def test_weekly_days_wrap_to_next_week() -> None:
    task = _recurring(WEDNESDAY, frequency="weekly", days_of_week=(1, 3))

    assert next_occurrence(task) == date(2026, 1, 12)


def test_weekly_days_stay_within_week() -> None:
    monday = date(2026, 1, 5)
    task = _recurring(monday, frequency="weekly", days_of_week=(3, 1))

    assert next_occurrence(task) == WEDNESDAY


def test_weekly_days_respect_interval_on_wrap() -> None:
    task = _recurring(WEDNESDAY, frequency="custom", interval=2, days_of_week=(1, 3))

    assert next_occurrence(task) == date(2026, 1, 19)


def test_sunday_is_weekday_zero() -> None:
    sunday = date(2026, 1, 4)

    assert next_occurrence(_recurring(sunday, frequency="weekly", days_of_week=(0,))) == date(2026, 1, 11)
    assert next_occurrence(_recurring(sunday, frequency="weekly", days_of_week=(0, 6))) == date(2026, 1, 10)


@pytest.mark.parametrize(
    ("frequency", "interval", "expected"),
    [
        ("daily", 1, date(2026, 1, 8)),
        ("daily", 3, date(2026, 1, 10)),
        ("weekly", 1, date(2026, 1, 14)),
        ("weekly", 2, date(2026, 1, 21)),
        ("monthly", 1, date(2026, 2, 7)),
        ("yearly", 2, date(2028, 1, 7)),
    ],
)
def test_simple_frequencies(frequency: str, interval: int, expected: date) -> None:
    assert next_occurrence(_recurring(WEDNESDAY, frequency=frequency, interval=interval)) == expected


def test_monthly_clamps_to_end_of_month() -> None:
    assert next_occurrence(_recurring(date(2026, 1, 31), frequency="monthly")) == date(2026, 2, 28)
    assert next_occurrence(_recurring(date(2024, 1, 31), frequency="monthly")) == date(2024, 2, 29)
    assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)


def test_yearly_from_leap_day_clamps() -> None:
    assert next_occurrence(_recurring(date(2024, 2, 29), frequency="yearly")) == date(2025, 2, 28)


def test_time_of_day_is_preserved() -> None:
    task = _recurring("2026-01-07T18:30:00", frequency="daily")

    assert next_occurrence(task) == datetime(2026, 1, 8, 18, 30)


def test_non_positive_interval_counts_as_one() -> None:
    assert next_occurrence(_recurring(WEDNESDAY, frequency="daily", interval=0)) == date(2026, 1, 8)


def test_end_date_is_inclusive() -> None:
    on_boundary = _recurring(WEDNESDAY, frequency="daily", end_date="2026-01-08")
    past_boundary = _recurring(WEDNESDAY, frequency="daily", end_date=date(2026, 1, 7))

    assert next_occurrence(on_boundary) == date(2026, 1, 8)
    result = evaluate_recurrence(past_boundary)
    assert result.status is RecurrenceStatus.ENDED
    assert result.next_due is None


def test_no_recurrence_without_config_or_date() -> None:
    assert next_occurrence(make_task("plain", due_date=WEDNESDAY)) is None
    assert next_occurrence(_recurring(WEDNESDAY, enabled=False, frequency="daily")) is None
    assert next_occurrence(_recurring(None, frequency="daily")) is None
    assert next_occurrence(_recurring("someday", frequency="daily")) is None
    assert evaluate_recurrence(_recurring(None, frequency="daily")).status is RecurrenceStatus.NOT_RECURRING


def test_custom_without_weekdays_is_unsupported() -> None:
    task = _recurring(WEDNESDAY, frequency="custom")

    result = evaluate_recurrence(task)

    assert result.status is RecurrenceStatus.UNSUPPORTED
    assert next_occurrence(task) is None


def test_unreadable_weekday_entries_are_skipped() -> None:
    task = _recurring(WEDNESDAY, frequency="weekly", days_of_week=("mon", None, "5", 9))

    assert next_occurrence(task) == date(2026, 1, 9)


def test_only_unreadable_weekdays_fall_back_to_plain_weekly() -> None:
    assert next_occurrence(_recurring(WEDNESDAY, frequency="weekly", days_of_week=("mon",))) == date(2026, 1, 14)
    custom = _recurring(WEDNESDAY, frequency="custom", days_of_week=("mon",))
    assert evaluate_recurrence(custom).status is RecurrenceStatus.UNSUPPORTED
