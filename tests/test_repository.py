from __future__ import annotations

from datetime import date, datetime

import pytest

from tasklens.domain.entities import RecurrenceConfig
from tasklens.domain.enums import DeletePolicy
from tasklens.domain.sorting import SortConfig
from tasklens.infra.db import create_schema, drop_schema
from tasklens.infra.repository import TaskRepository
from tasklens.services.recurrence_service import RecurrenceService
from tasklens.services.task_service import TaskService


@pytest.fixture
def repo():
    create_schema()
    try:
        yield TaskRepository()
    finally:
        drop_schema()


def _family(repo: TaskRepository):
    parent = repo.create_task({"title": "Move house"})
    child = repo.create_task({"title": "Pack", "parent_id": parent.id})
    grandchild = repo.create_task({"title": "Buy boxes", "parent_id": child.id})
    sibling = repo.create_task({"title": "Change address", "parent_id": parent.id})
    return parent, child, grandchild, sibling


def test_create_and_get_round_trip(repo: TaskRepository) -> None:
    created = repo.create_task({
        "title": "Essay",
        "type": "assignment",
        "time_frame": "weekly",
        "priority": "high",
        "tags": ("exam", "study"),
        "due_date": date(2026, 4, 1),
    })

    loaded = repo.get_task(created.id)

    assert loaded.title == "Essay"
    assert loaded.tags == ("exam", "study")
    assert loaded.due_date == "2026-04-01"
    assert loaded.completed is False
    assert loaded.recurring is None
    assert repo.get_task("missing") is None


def test_load_forest_rebuilds_hierarchy(repo: TaskRepository) -> None:
    parent, child, grandchild, sibling = _family(repo)

    forest = repo.load_forest()

    assert [t.id for t in forest] == [parent.id]
    assert [t.id for t in forest[0].subtasks] == [child.id, sibling.id]
    assert [t.id for t in forest[0].subtasks[0].subtasks] == [grandchild.id]


def test_reorder_changes_sibling_order(repo: TaskRepository) -> None:
    parent, child, _, sibling = _family(repo)

    repo.reorder_tasks([sibling.id, child.id])

    assert [t.id for t in repo.load_forest()[0].subtasks] == [sibling.id, child.id]


def test_delete_cascades_to_descendants(repo: TaskRepository) -> None:
    parent, child, grandchild, sibling = _family(repo)

    deleted = repo.delete_task(child.id, DeletePolicy.CASCADE)

    assert sorted(deleted) == sorted([child.id, grandchild.id])
    assert repo.get_task(grandchild.id) is None
    assert [t.id for t in repo.load_forest()[0].subtasks] == [sibling.id]


def test_delete_orphan_promotes_children(repo: TaskRepository) -> None:
    parent, child, grandchild, sibling = _family(repo)

    deleted = repo.delete_task(parent.id, DeletePolicy.ORPHAN)

    assert deleted == [parent.id]
    roots = {t.id for t in repo.load_forest()}
    assert roots == {child.id, sibling.id}
    assert repo.get_task(grandchild.id).parent_id == child.id
    assert repo.delete_task("missing") == []


def test_recurrence_fields_round_trip(repo: TaskRepository) -> None:
    created = repo.create_task({
        "title": "Standup",
        "due_date": "2026-01-07",
        "recurring": RecurrenceConfig(
            enabled=True,
            frequency="weekly",
            interval=2,
            days_of_week=(1, 3),
            end_date=date(2026, 6, 1),
        ),
    })
    stamp = datetime(2026, 1, 12, 8, 0)

    repo.mark_generated(created.id, stamp)
    loaded = repo.get_task(created.id)

    assert loaded.recurring.frequency == "weekly"
    assert loaded.recurring.interval == 2
    assert loaded.recurring.days_of_week == (1, 3)
    assert loaded.recurring.end_date == "2026-06-01"
    assert loaded.recurring.last_generated == stamp


def test_list_records_is_flat_and_in_sibling_order(repo: TaskRepository) -> None:
    parent, child, grandchild, sibling = _family(repo)
    repo.reorder_tasks([sibling.id, child.id])

    records = repo.list_records()

    assert len(records) == 4
    assert all(record.subtasks == () for record in records)
    siblings = [record.id for record in records if record.parent_id == parent.id]
    assert siblings == [sibling.id, child.id]
    assert repo.load_index().ancestors(grandchild.id) == [child.id, parent.id]


def test_malformed_due_date_is_kept_and_sorts_last(repo: TaskRepository) -> None:
    repo.create_task({"title": "Whenever", "due_date": "soon-ish"})
    repo.create_task({"title": "Dated", "due_date": "2026-02-01"})

    tasks = TaskService(repo).list_tasks(sort=SortConfig(primary="due_date", primary_ascending=False))

    assert [t.title for t in tasks] == ["Dated", "Whenever"]


def test_recurrence_scan_against_database(repo: TaskRepository) -> None:
    series = repo.create_task({
        "title": "Water plants",
        "completed": True,
        "due_date": "2026-01-10",
        "recurring": RecurrenceConfig(enabled=True, frequency="daily"),
    })

    report = RecurrenceService(repo).run_scan(datetime(2026, 1, 12, 8, 0))

    assert len(report.generated) == 1
    created = repo.get_task(report.generated[0].id)
    assert created.due_date == "2026-01-11"
    assert created.completed is False
    assert created.recurring.last_generated is None
    assert repo.get_task(series.id).recurring.last_generated == datetime(2026, 1, 12, 8, 0)
