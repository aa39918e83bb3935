from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

from .enums import Priority, RecurrenceRule, TaskType, TimeFrame

DateValue = Union[date, datetime, str]


@dataclass(frozen=True)
class RecurrenceConfig:
    enabled: bool = False
    frequency: str = RecurrenceRule.DAILY.value
    interval: int = 1
    days_of_week: tuple[int, ...] = ()
    end_date: Optional[DateValue] = None
    last_generated: Optional[datetime] = None

    @property
    def step(self) -> int:
        try:
            return max(int(self.interval or 1), 1)
        except (TypeError, ValueError):
            return 1


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    created_at: datetime
    description: str = ""
    type: str = TaskType.TASK.value
    time_frame: str = TimeFrame.DAILY.value
    completed: bool = False
    priority: str = Priority.MEDIUM.value
    project: str = ""
    list_id: str = ""
    due_date: Optional[DateValue] = None
    tags: tuple[str, ...] = ()
    parent_id: str | None = None
    subtasks: tuple["TaskEntity", ...] = ()
    recurring: Optional[RecurrenceConfig] = None
    attachments: tuple = field(default=(), compare=False)
    reminders: tuple = field(default=(), compare=False)

    @property
    def is_recurring(self) -> bool:
        return self.recurring is not None and self.recurring.enabled


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    color: str = ""

