from __future__ import annotations

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from tasklens.domain.dates import utc_now

from .db import Base


def new_id() -> str:
    return str(uuid.uuid4())


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    parent_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False, default="task")
    time_frame = Column(String(20), nullable=False, default="daily", index=True)
    priority = Column(String(10), nullable=False, default="medium")
    project = Column(String(64), nullable=False, default="")
    list_id = Column(String(64), nullable=False, default="", index=True)
    tags = Column(JSON, nullable=False, default=list)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    due_date = Column(String(40), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    recurring_enabled = Column(Boolean, nullable=False, default=False)
    recurring_frequency = Column(String(20), nullable=True)
    recurring_interval = Column(Integer, nullable=False, default=1)
    recurring_days = Column(JSON, nullable=False, default=list)
    recurring_end_date = Column(String(40), nullable=True)
    recurring_last_generated = Column(DateTime, nullable=True)
