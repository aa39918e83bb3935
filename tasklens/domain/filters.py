from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from .dates import is_due_on, is_overdue
from .entities import TaskEntity
from .enums import ALL, CompletionState


@dataclass(frozen=True)
class TaskFilters:
    search: str | None = None
    time_frame: str = ALL
    priority: str = ALL
    project: str = ALL
    list_id: str = ALL
    completion: str = CompletionState.ALL.value
    tags: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    due_on: Optional[date] = None


def _is_wildcard(value: str | None) -> bool:
    return value is None or value == "" or value == ALL


def _matches_search(task: TaskEntity, needle: str) -> bool:
    needle = needle.lower()
    if needle in (task.title or "").lower():
        return True
    if task.description and needle in task.description.lower():
        return True
    return any(needle in tag.lower() for tag in task.tags or ())


def _matches_completion(task: TaskEntity, state: str, today: date | None) -> bool:
    if state == CompletionState.COMPLETED.value:
        return task.completed
    if state == CompletionState.PENDING.value:
        return not task.completed
    if state == CompletionState.OVERDUE.value:
        return is_overdue(task, today)
    # "all" and unrecognised states do not constrain
    return True


def matches(task: TaskEntity, filters: TaskFilters, today: date | None = None) -> bool:
    if filters.search and not _matches_search(task, filters.search):
        return False
    if not _is_wildcard(filters.time_frame) and task.time_frame != filters.time_frame:
        return False
    if not _is_wildcard(filters.priority) and task.priority != filters.priority:
        return False
    if not _is_wildcard(filters.project) and task.project != filters.project:
        return False
    if not _is_wildcard(filters.list_id) and task.list_id != filters.list_id:
        return False
    if not _matches_completion(task, filters.completion, today):
        return False
    if filters.tags and not set(filters.tags).intersection(task.tags or ()):
        return False
    if filters.types and task.type not in filters.types:
        return False
    if filters.due_on is not None and not is_due_on(task, filters.due_on):
        return False
    return True


def filter_tasks(
    tasks: Iterable[TaskEntity],
    filters: TaskFilters,
    today: date | None = None,
) -> list[TaskEntity]:
    """Keep the tasks that satisfy every active constraint, in input order."""
    return [task for task in tasks if matches(task, filters, today)]

