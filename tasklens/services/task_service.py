from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Mapping

from tasklens.domain import aggregation
from tasklens.domain.entities import Project, TaskEntity
from tasklens.domain.enums import DeletePolicy
from tasklens.domain.errors import TaskNotFoundError
from tasklens.domain.filters import TaskFilters, filter_tasks
from tasklens.domain.hierarchy import flatten
from tasklens.domain.sorting import DEFAULT_SORT, SortConfig, sort_tasks
from tasklens.infra.repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        delete_policy: DeletePolicy = DeletePolicy.CASCADE,
        project_names: Mapping[str, str] | None = None,
    ) -> None:
        self._repo = repo
        self._delete_policy = delete_policy
        self._project_names = dict(project_names or {})

    def set_projects(self, projects: Iterable[Project]) -> None:
        self._project_names = {project.id: project.name for project in projects}

    def get_forest(self) -> list[TaskEntity]:
        return self._repo.load_forest()

    def list_tasks(
        self,
        filters: TaskFilters = TaskFilters(),
        sort: SortConfig = DEFAULT_SORT,
        today: date | None = None,
    ) -> list[TaskEntity]:
        """Every task, subtasks included, filtered and sorted as one flat sequence."""
        tasks = filter_tasks(flatten(self.get_forest()), filters, today)
        return sort_tasks(tasks, sort, self._project_names)

    def list_roots(
        self,
        filters: TaskFilters = TaskFilters(),
        sort: SortConfig = DEFAULT_SORT,
        today: date | None = None,
    ) -> list[TaskEntity]:
        """Root tasks that pass the filters; each subtask list is sorted with the same config."""
        roots = filter_tasks(self.get_forest(), filters, today)
        return [self._sort_subtree(task, sort) for task in sort_tasks(roots, sort, self._project_names)]

    def _sort_subtree(self, task: TaskEntity, sort: SortConfig) -> TaskEntity:
        if not task.subtasks:
            return task
        children = sort_tasks(task.subtasks, sort, self._project_names)
        return replace(task, subtasks=tuple(self._sort_subtree(child, sort) for child in children))

    def group_by_time_frame(self, filters=None, sort=DEFAULT_SORT, overrides=None, today=None):
        return aggregation.group_by_time_frame(
            self.get_forest(), filters, sort, overrides, today, self._project_names
        )

    def group_by_priority(self, filters=None, sort=DEFAULT_SORT, overrides=None, today=None):
        return aggregation.group_by_priority(
            self.get_forest(), filters, sort, overrides, today, self._project_names
        )

    def group_by_project(self, filters=None, sort=DEFAULT_SORT, overrides=None, today=None):
        return aggregation.group_by_project(
            self.get_forest(), filters, sort, overrides, today, self._project_names
        )

    def group_by_tag(self, filters=None, sort=DEFAULT_SORT, overrides=None, today=None):
        return aggregation.group_by_tag(
            self.get_forest(), filters, sort, overrides, today, self._project_names
        )

    def get_summary(self, today: date | None = None, filters: TaskFilters | None = None) -> aggregation.TaskSummary:
        return aggregation.summarize(self.get_forest(), today, filters)

    def available_tags(self) -> list[str]:
        return aggregation.all_used_tags(self.get_forest())

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        return self._repo.create_task(dict(data))

    def add_subtask(self, parent_id: str, data: dict) -> TaskEntity:
        parent = self._repo.get_task(parent_id)
        if parent is None:
            raise TaskNotFoundError(parent_id)
        payload = {"list_id": parent.list_id, **data, "parent_id": parent_id}
        return self._repo.create_task(payload)

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        changes = {key: value for key, value in data.items() if key not in ("id", "parent_id", "subtasks")}
        return self._repo.update_task(task_id, changes)

    def toggle_completed(self, task_id: str) -> TaskEntity | None:
        task = self._repo.get_task(task_id)
        if not task:
            return None
        return self._repo.update_task(task_id, {"completed": not task.completed})

    def delete_task(self, task_id: str, policy: DeletePolicy | None = None) -> list[str]:
        deleted = self._repo.delete_task(task_id, policy or self._delete_policy)
        if deleted:
            logger.info("Deleted task %s (%d removed)", task_id, len(deleted))
        return deleted

    def reorder_tasks(self, task_ids: list[str]) -> None:
        self._repo.reorder_tasks(task_ids)
