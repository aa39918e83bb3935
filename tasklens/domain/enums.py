from __future__ import annotations

from enum import IntEnum, StrEnum


class TaskType(StrEnum):
    TASK = "task"
    EVENT = "event"
    ASSIGNMENT = "assignment"


class TimeFrame(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PriorityRank(IntEnum):
    UNKNOWN = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class RecurrenceRule(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class RecurrenceStatus(StrEnum):
    SCHEDULED = "scheduled"
    NOT_RECURRING = "not_recurring"
    ENDED = "ended"
    UNSUPPORTED = "unsupported"


class CompletionState(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"
    OVERDUE = "overdue"


class SortKey(StrEnum):
    TITLE = "title"
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    PROJECT = "project"
    TAGS = "tags"


class DeletePolicy(StrEnum):
    CASCADE = "cascade"
    ORPHAN = "orphan"


ALL = "all"


def priority_rank(value: str | None) -> int:
    try:
        return PriorityRank[Priority(value).name]
    except ValueError:
        return PriorityRank.UNKNOWN
