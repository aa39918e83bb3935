from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, select

from tasklens.domain.entities import RecurrenceConfig, TaskEntity
from tasklens.domain.enums import DeletePolicy
from tasklens.domain.hierarchy import TaskIndex

from .db import SessionLocal
from .models import TaskModel

_DATE_FIELDS = ("due_date", "recurring_end_date")


def _to_entity(model: TaskModel) -> TaskEntity:
    recurring = None
    if model.recurring_enabled:
        recurring = RecurrenceConfig(
            enabled=True,
            frequency=model.recurring_frequency or "daily",
            interval=model.recurring_interval or 1,
            days_of_week=tuple(model.recurring_days or ()),
            end_date=model.recurring_end_date,
            last_generated=model.recurring_last_generated,
        )
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        type=model.type,
        time_frame=model.time_frame,
        completed=model.completed,
        priority=model.priority,
        project=model.project,
        list_id=model.list_id,
        due_date=model.due_date,
        tags=tuple(model.tags or ()),
        created_at=model.created_at,
        parent_id=model.parent_id,
        recurring=recurring,
    )


def _serialize_date(value) -> str | None:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value or None


def _normalize(data: dict) -> dict:
    normalized = dict(data)
    recurring = normalized.pop("recurring", None)
    if isinstance(recurring, RecurrenceConfig):
        normalized.update({
            "recurring_enabled": recurring.enabled,
            "recurring_frequency": recurring.frequency,
            "recurring_interval": recurring.step,
            "recurring_days": list(recurring.days_of_week),
            "recurring_end_date": recurring.end_date,
            "recurring_last_generated": recurring.last_generated,
        })
    for key in _DATE_FIELDS:
        if key in normalized:
            normalized[key] = _serialize_date(normalized[key])
    if "tags" in normalized:
        normalized["tags"] = list(normalized["tags"] or ())
    normalized.pop("subtasks", None)
    return normalized


class TaskRepository:
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory or SessionLocal

    def list_records(self) -> list[TaskEntity]:
        """Every stored task as a flat record, in sibling order (position, then creation)."""
        with self._session_factory() as session:
            stmt = select(TaskModel).order_by(TaskModel.position.asc(), TaskModel.created_at.asc())
            return [_to_entity(task) for task in session.scalars(stmt)]

    def load_index(self) -> TaskIndex:
        return TaskIndex.from_records(self.list_records())

    def load_forest(self) -> list[TaskEntity]:
        return self.load_index().roots()

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def create_task(self, data: dict) -> TaskEntity:
        with self._session_factory() as session:
            data = _normalize(data)
            if data.get("position") is None:
                data["position"] = self._next_position(session, data.get("parent_id"))
            task = TaskModel(**data)
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def update_task(self, task_id: str, data: dict) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None

            for key, value in _normalize(data).items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def mark_generated(self, task_id: str, when: datetime) -> Optional[TaskEntity]:
        return self.update_task(task_id, {"recurring_last_generated": when})

    def reorder_tasks(self, task_ids: list[str]) -> None:
        if not task_ids:
            return
        with self._session_factory() as session:
            tasks = session.scalars(select(TaskModel).where(TaskModel.id.in_(task_ids))).all()
            order_map = {task_id: index for index, task_id in enumerate(task_ids, start=1)}
            for task in tasks:
                task.position = order_map.get(task.id, task.position)
            session.commit()

    def delete_task(self, task_id: str, policy: DeletePolicy | str = DeletePolicy.CASCADE) -> list[str]:
        """Delete a task and detach it from its parent.

        Returns the deleted ids; an unknown id deletes nothing.
        """
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return []

            children = session.scalars(select(TaskModel).where(TaskModel.parent_id == task_id)).all()
            if DeletePolicy(policy) is DeletePolicy.ORPHAN:
                for child in children:
                    child.parent_id = None
                doomed = [task]
            else:
                doomed = [task]
                frontier = list(children)
                while frontier:
                    doomed.extend(frontier)
                    ids = [row.id for row in frontier]
                    frontier = list(session.scalars(select(TaskModel).where(TaskModel.parent_id.in_(ids))))
            session.flush()

            deleted = [row.id for row in doomed]
            for row in reversed(doomed):
                session.delete(row)
                session.flush()
            session.commit()
            return deleted

    @staticmethod
    def _next_position(session, parent_id: str | None) -> int:
        condition = TaskModel.parent_id.is_(None) if parent_id is None else TaskModel.parent_id == parent_id
        max_position = session.scalar(select(func.max(TaskModel.position)).where(condition))
        return (max_position or 0) + 1
