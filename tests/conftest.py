from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from dataclasses import replace
from datetime import datetime
from itertools import count

import pytest

from tasklens.domain.entities import RecurrenceConfig, TaskEntity
from tasklens.domain.enums import DeletePolicy
from tasklens.domain.errors import TaskNotFoundError
from tasklens.domain.hierarchy import TaskIndex

BASE_TIME = datetime(2026, 1, 1, 9, 0)


def make_task(task_id: str, **fields) -> TaskEntity:
    fields.setdefault("title", task_id)
    fields.setdefault("created_at", BASE_TIME)
    return TaskEntity(id=task_id, **fields)


class FakeRepo:
    def __init__(self, roots: list[TaskEntity] | None = None) -> None:
        self.index = TaskIndex.from_forest(roots or [])
        self.created: list[TaskEntity] = []
        self.deleted: list[tuple[str, DeletePolicy]] = []
        self._ids = count(1)

    def load_forest(self) -> list[TaskEntity]:
        return self.index.roots()

    def get_task(self, task_id: str) -> TaskEntity | None:
        if task_id not in self.index:
            return None
        return replace(self.index.get(task_id), subtasks=())

    def create_task(self, data: dict) -> TaskEntity:
        data = dict(data)
        data.setdefault("created_at", BASE_TIME)
        data["tags"] = tuple(data.get("tags", ()))
        task = TaskEntity(id=f"new-{next(self._ids)}", **data)
        created = self.index.add_task(task)
        self.created.append(created)
        return created

    def update_task(self, task_id: str, data: dict) -> TaskEntity | None:
        if task_id not in self.index:
            return None
        return self.index.update(task_id, **data)

    def mark_generated(self, task_id: str, when: datetime) -> TaskEntity | None:
        task = self.index.get(task_id)
        return self.index.update(task_id, recurring=replace(task.recurring, last_generated=when))

    def delete_task(self, task_id: str, policy=DeletePolicy.CASCADE) -> list[str]:
        self.deleted.append((task_id, DeletePolicy(policy)))
        try:
            return self.index.remove(task_id, policy)
        except TaskNotFoundError:
            return []

    def reorder_tasks(self, task_ids: list[str]) -> None:
        pass


@pytest.fixture
def weekly_series() -> TaskEntity:
    return make_task(
        "series",
        title="Gym",
        completed=True,
        due_date="2026-01-07",
        tags=("health",),
        recurring=RecurrenceConfig(enabled=True, frequency="weekly", interval=1, days_of_week=(1, 3)),
    )
