from __future__ import annotations

import logging
import sys

from tasklens.config import SETTINGS
from tasklens.infra.db import init_db
from tasklens.infra.logging import setup_logging
from tasklens.infra.repository import TaskRepository
from tasklens.services.recurrence_service import RecurrenceService
from tasklens.services.scheduler import RecurrenceScheduler
from tasklens.services.task_service import TaskService

logger = logging.getLogger(__name__)


def build_services(repo: TaskRepository | None = None) -> tuple[TaskService, RecurrenceService]:
    repo = repo or TaskRepository()
    return TaskService(repo, delete_policy=SETTINGS.delete_policy), RecurrenceService(repo)


def main() -> None:
    setup_logging()
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.error("DB error: %s", exc)
        sys.exit(1)

    _, recurrence = build_services()
    scheduler = RecurrenceScheduler(
        recurrence.run_scan,
        interval_s=SETTINGS.recurrence_scan_interval_s,
        run_immediately=False,
    )
    try:
        # First scan runs in the foreground.
        scheduler.run_once()
        scheduler.start()
        while scheduler.running:
            scheduler.join(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
