from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Hashable, Iterable, Mapping, Optional, Sequence

from .dates import is_due_on, is_overdue, is_upcoming
from .entities import TaskEntity
from .enums import Priority, TaskType, TimeFrame
from .filters import TaskFilters, filter_tasks
from .hierarchy import flatten
from .sorting import DEFAULT_SORT, SortConfig, sort_tasks

UNTAGGED = ""
NO_PROJECT = ""


def group_by(
    tasks: Iterable[TaskEntity],
    key_fn: Callable[[TaskEntity], Hashable],
) -> dict[Hashable, list[TaskEntity]]:
    """Bucket tasks by ``key_fn`` keeping input order inside each bucket."""
    groups: dict[Hashable, list[TaskEntity]] = {}
    for task in tasks:
        groups.setdefault(key_fn(task), []).append(task)
    return groups


def count_by(tasks: Iterable[TaskEntity], key_fn: Callable[[TaskEntity], Hashable]) -> dict[Hashable, int]:
    return dict(Counter(key_fn(task) for task in tasks))


def _group_by_tag(tasks: Iterable[TaskEntity]) -> dict[str, list[TaskEntity]]:
    groups: dict[str, list[TaskEntity]] = {}
    for task in tasks:
        for tag in dict.fromkeys(task.tags) or (UNTAGGED,):
            groups.setdefault(tag, []).append(task)
    return groups


def _sort_groups(
    groups: Mapping[Hashable, list[TaskEntity]],
    sort: SortConfig,
    overrides: Mapping[Hashable, SortConfig] | None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    overrides = overrides or {}
    return {
        key: sort_tasks(items, overrides.get(key, sort), project_names)
        for key, items in groups.items()
    }


def _seed(keys: Sequence[str]) -> dict[Hashable, list[TaskEntity]]:
    return {key: [] for key in keys}


def build_groups(
    forest: Sequence[TaskEntity],
    key_fn: Callable[[TaskEntity], Hashable],
    filters: TaskFilters | None = None,
    sort: SortConfig = DEFAULT_SORT,
    overrides: Mapping[Hashable, SortConfig] | None = None,
    today: date | None = None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    """Flatten, optionally filter, group, then sort every group independently."""
    tasks = flatten(forest)
    if filters is not None:
        tasks = filter_tasks(tasks, filters, today)
    return _sort_groups(group_by(tasks, key_fn), sort, overrides, project_names)


def group_by_time_frame(
    forest: Sequence[TaskEntity],
    filters: TaskFilters | None = None,
    sort: SortConfig = DEFAULT_SORT,
    overrides: Mapping[Hashable, SortConfig] | None = None,
    today: date | None = None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    groups = build_groups(forest, lambda t: t.time_frame, filters, sort, overrides, today, project_names)
    return {**_seed([tf.value for tf in TimeFrame]), **groups}


def group_by_priority(
    forest: Sequence[TaskEntity],
    filters: TaskFilters | None = None,
    sort: SortConfig = DEFAULT_SORT,
    overrides: Mapping[Hashable, SortConfig] | None = None,
    today: date | None = None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    groups = build_groups(forest, lambda t: t.priority, filters, sort, overrides, today, project_names)
    ordered = _seed([Priority.HIGH.value, Priority.MEDIUM.value, Priority.LOW.value])
    ordered.update(groups)
    return ordered


def group_by_project(
    forest: Sequence[TaskEntity],
    filters: TaskFilters | None = None,
    sort: SortConfig = DEFAULT_SORT,
    overrides: Mapping[Hashable, SortConfig] | None = None,
    today: date | None = None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    return build_groups(forest, lambda t: t.project or NO_PROJECT, filters, sort, overrides, today, project_names)


def group_by_tag(
    forest: Sequence[TaskEntity],
    filters: TaskFilters | None = None,
    sort: SortConfig = DEFAULT_SORT,
    overrides: Mapping[Hashable, SortConfig] | None = None,
    today: date | None = None,
    project_names: Mapping[str, str] | None = None,
) -> dict[Hashable, list[TaskEntity]]:
    """Tasks appear once under every tag they carry; untagged ones under ``UNTAGGED``."""
    tasks = flatten(forest)
    if filters is not None:
        tasks = filter_tasks(tasks, filters, today)
    groups = _group_by_tag(tasks)
    ordered = {tag: groups[tag] for tag in sorted(tag for tag in groups if tag != UNTAGGED)}
    if UNTAGGED in groups:
        ordered[UNTAGGED] = groups[UNTAGGED]
    return _sort_groups(ordered, sort, overrides, project_names)


def all_used_tags(forest: Sequence[TaskEntity]) -> list[str]:
    used: set[str] = set()
    for task in flatten(forest):
        used.update(task.tags or ())
    return sorted(used)


@dataclass(frozen=True)
class TaskSummary:
    total: int
    completed: int
    pending: int
    overdue: int
    due_today: int
    upcoming: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_time_frame: dict[str, int] = field(default_factory=dict)

    @property
    def completion_rate(self) -> float:
        return self.completed / self.total if self.total else 0.0


def summarize(
    forest: Sequence[TaskEntity],
    today: date | None = None,
    filters: Optional[TaskFilters] = None,
) -> TaskSummary:
    today = today or date.today()
    tasks = flatten(forest)
    if filters is not None:
        tasks = filter_tasks(tasks, filters, today)

    completed = sum(1 for task in tasks if task.completed)
    by_type = {kind.value: 0 for kind in TaskType}
    by_type.update(count_by(tasks, lambda t: t.type))
    by_time_frame = {tf.value: 0 for tf in TimeFrame}
    by_time_frame.update(count_by(tasks, lambda t: t.time_frame))

    return TaskSummary(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=sum(1 for task in tasks if is_overdue(task, today)),
        due_today=sum(1 for task in tasks if is_due_on(task, today)),
        upcoming=sum(1 for task in tasks if is_upcoming(task, today)),
        by_type=by_type,
        by_time_frame=by_time_frame,
    )
