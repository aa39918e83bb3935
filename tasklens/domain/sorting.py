"""Composite task ordering.

Completed tasks always go after incomplete ones. Within each partition the
primary key decides, then the optional secondary key, then input order
(``sorted`` is stable). For ``priority`` ascending means low to high rank,
so "high first" is ``primary_ascending=False``. Missing due dates and empty
tag lists sort last in both directions. Unknown keys compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Iterable, Mapping, Optional

from .dates import parse_date
from .entities import TaskEntity
from .enums import SortKey, priority_rank

Comparator = Callable[[TaskEntity, TaskEntity], int]


@dataclass(frozen=True)
class SortConfig:
    primary: str = SortKey.DUE_DATE.value
    primary_ascending: bool = True
    secondary: Optional[str] = None
    secondary_ascending: bool = True


DEFAULT_SORT = SortConfig()


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _directed(result: int, ascending: bool) -> int:
    return result if ascending else -result


def _text_key(value: str | None) -> tuple[str, str]:
    value = value or ""
    return value.casefold(), value


def _compare_missing_last(a, b, ascending: bool) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return _directed(_cmp(a, b), ascending)


def _compare_due_date(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
    return _compare_missing_last(parse_date(a.due_date), parse_date(b.due_date), ascending)


def _compare_created_at(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
    return _compare_missing_last(parse_date(a.created_at), parse_date(b.created_at), ascending)


def _compare_priority(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
    return _directed(_cmp(priority_rank(a.priority), priority_rank(b.priority)), ascending)


def _compare_title(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
    return _directed(_cmp(_text_key(a.title), _text_key(b.title)), ascending)


def _compare_tags(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
    first_a = _text_key(a.tags[0]) if a.tags else None
    first_b = _text_key(b.tags[0]) if b.tags else None
    return _compare_missing_last(first_a, first_b, ascending)


def _project_comparator(project_names: Mapping[str, str] | None) -> Callable[[TaskEntity, TaskEntity, bool], int]:
    names = project_names or {}

    def _compare(a: TaskEntity, b: TaskEntity, ascending: bool) -> int:
        name_a = names.get(a.project, a.project)
        name_b = names.get(b.project, b.project)
        return _directed(_cmp(_text_key(name_a), _text_key(name_b)), ascending)

    return _compare


def _criterion(key: str | None, ascending: bool, project_names: Mapping[str, str] | None) -> Comparator | None:
    try:
        sort_key = SortKey(key)
    except ValueError:
        return None

    compare = {
        SortKey.TITLE: _compare_title,
        SortKey.CREATED_AT: _compare_created_at,
        SortKey.DUE_DATE: _compare_due_date,
        SortKey.PRIORITY: _compare_priority,
        SortKey.PROJECT: _project_comparator(project_names),
        SortKey.TAGS: _compare_tags,
    }[sort_key]
    return lambda a, b: compare(a, b, ascending)


def build_comparator(config: SortConfig, project_names: Mapping[str, str] | None = None) -> Comparator:
    criteria = [
        criterion
        for criterion in (
            _criterion(config.primary, config.primary_ascending, project_names),
            _criterion(config.secondary, config.secondary_ascending, project_names),
        )
        if criterion is not None
    ]

    def _compare(a: TaskEntity, b: TaskEntity) -> int:
        if a.completed != b.completed:
            return 1 if a.completed else -1
        for criterion in criteria:
            result = criterion(a, b)
            if result:
                return result
        return 0

    return _compare


def sort_tasks(
    tasks: Iterable[TaskEntity],
    config: SortConfig = DEFAULT_SORT,
    project_names: Mapping[str, str] | None = None,
) -> list[TaskEntity]:
    return sorted(tasks, key=cmp_to_key(build_comparator(config, project_names)))
