from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from tasklens.domain.dates import parse_date, utc_now
from tasklens.domain.entities import TaskEntity
from tasklens.domain.enums import RecurrenceStatus
from tasklens.domain.hierarchy import flatten
from tasklens.domain.recurrence import evaluate_recurrence
from tasklens.infra.repository import TaskRepository

logger = logging.getLogger(__name__)

MIN_GENERATION_GAP = timedelta(days=1)
LOCK_STRIPES = 64


@dataclass
class ScanReport:
    generated: list[TaskEntity] = field(default_factory=list)
    throttled: list[str] = field(default_factory=list)
    not_due: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    ended: list[str] = field(default_factory=list)
    unsupported: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class RecurrenceService:
    """Spawns the next instance of completed recurring tasks.

    One scan may run while another is in flight; generation for a given
    series is serialized by a lock picked from a fixed set of stripes.
    Timestamps are naive UTC, matching the ``created_at`` column default.
    A series that fails is logged and listed in ``ScanReport.failed``;
    the remaining series are still processed.
    """

    def __init__(self, repo: TaskRepository, min_gap: timedelta = MIN_GENERATION_GAP) -> None:
        self._repo = repo
        self._min_gap = min_gap
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def _series_lock(self, task_id: str) -> threading.Lock:
        return self._locks[hash(task_id) % len(self._locks)]

    def run_scan(self, now: datetime | None = None) -> ScanReport:
        now = now or utc_now()
        report = ScanReport()
        tasks = flatten(self._repo.load_forest())
        existing = {(task.parent_id, task.title, parse_date(task.due_date)) for task in tasks}

        for task in tasks:
            if not task.completed or not task.is_recurring:
                continue
            try:
                with self._series_lock(task.id):
                    self._process(task, now, existing, report)
            except Exception:
                logger.exception("Recurrence generation failed for task %s", task.id)
                report.failed.append(task.id)

        if report.generated:
            logger.info("Recurrence scan generated %d task(s)", len(report.generated))
        return report

    def _process(self, task: TaskEntity, now: datetime, existing: set, report: ScanReport) -> None:
        # Re-read under the lock; a concurrent scan may have stamped the series.
        current = self._repo.get_task(task.id) or task
        if not current.completed or not current.is_recurring:
            return
        last = current.recurring.last_generated
        if last is not None and now - last < self._min_gap:
            report.throttled.append(task.id)
            return

        result = evaluate_recurrence(current)
        if result.status is RecurrenceStatus.ENDED:
            report.ended.append(task.id)
            return
        if result.status is RecurrenceStatus.UNSUPPORTED:
            logger.warning(
                "Task %s uses %r recurrence without weekdays; skipping",
                task.id,
                current.recurring.frequency,
            )
            report.unsupported.append(task.id)
            return
        if result.status is not RecurrenceStatus.SCHEDULED:
            return

        next_due = parse_date(result.next_due)
        if next_due > now:
            report.not_due.append(task.id)
            return
        key = (current.parent_id, current.title, next_due)
        if key in existing:
            report.duplicates.append(task.id)
            return

        created = self._repo.create_task(self._successor(current, result.next_due, now))
        self._repo.mark_generated(current.id, now)
        existing.add(key)
        report.generated.append(created)
        logger.info("Generated %s from recurring task %s due %s", created.id, current.id, result.next_due)

    @staticmethod
    def _successor(task: TaskEntity, next_due, now: datetime) -> dict:
        return {
            "title": task.title,
            "description": task.description,
            "type": task.type,
            "time_frame": task.time_frame,
            "priority": task.priority,
            "project": task.project,
            "list_id": task.list_id,
            "tags": list(task.tags),
            "parent_id": task.parent_id,
            "completed": False,
            "due_date": next_due,
            "created_at": now,
            "recurring": replace(task.recurring, last_generated=None),
        }
