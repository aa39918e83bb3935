from __future__ import annotations


class TaskEngineError(Exception):
    pass


class TaskNotFoundError(TaskEngineError, KeyError):
    def __init__(self, task_id: str) -> None:
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self) -> str:
        return f"Task {self.task_id!r} not found"


class HierarchyError(TaskEngineError):
    pass
