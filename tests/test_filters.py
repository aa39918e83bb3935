from __future__ import annotations

from datetime import date

from conftest import make_task
from tasklens.domain.filters import TaskFilters, filter_tasks, matches

TODAY = date(2026, 3, 10)


def _sample():
    return [
        make_task("1", title="Read chapter 4", tags=("study",), time_frame="daily", priority="high"),
        make_task("2", title="Lab report", description="Chemistry LAB write-up", tags=("urgent", "exam")),
        make_task("3", title="Dentist", type="event", time_frame="monthly", completed=True, project="p-home"),
        make_task("4", title="Essay", type="assignment", tags=("exam",), due_date="2026-03-01", list_id="uni"),
        make_task("5", title="Groceries", due_date="2026-03-10", project="p-home"),
    ]


def _ids(tasks):
    return [t.id for t in tasks]


def test_tag_filter_uses_any_match() -> None:
    urgent = TaskFilters(tags=("urgent",))

    assert matches(make_task("a", tags=("urgent", "exam")), urgent)
    assert not matches(make_task("b", tags=("exam",)), urgent)
    assert _ids(filter_tasks(_sample(), TaskFilters(tags=("urgent", "study")))) == ["1", "2"]


def test_search_matches_title_description_or_tag_case_insensitive() -> None:
    tasks = _sample()

    assert _ids(filter_tasks(tasks, TaskFilters(search="lab"))) == ["2"]
    assert _ids(filter_tasks(tasks, TaskFilters(search="chemistry"))) == ["2"]
    assert _ids(filter_tasks(tasks, TaskFilters(search="EXA"))) == ["2", "4"]
    assert filter_tasks(tasks, TaskFilters(search="nothing here")) == []


def test_search_tolerates_missing_optional_fields() -> None:
    bare = make_task("bare", title="Plain", description="", tags=())

    assert matches(bare, TaskFilters(search="plain"))
    assert not matches(bare, TaskFilters(search="tag"))


def test_exact_match_fields_and_wildcards() -> None:
    tasks = _sample()

    assert _ids(filter_tasks(tasks, TaskFilters(time_frame="monthly"))) == ["3"]
    assert _ids(filter_tasks(tasks, TaskFilters(priority="high"))) == ["1"]
    assert _ids(filter_tasks(tasks, TaskFilters(project="p-home"))) == ["3", "5"]
    assert _ids(filter_tasks(tasks, TaskFilters(list_id="uni"))) == ["4"]
    assert _ids(filter_tasks(tasks, TaskFilters(time_frame="all", priority="all"))) == _ids(tasks)


def test_completion_states() -> None:
    tasks = _sample()

    assert _ids(filter_tasks(tasks, TaskFilters(completion="completed"))) == ["3"]
    assert _ids(filter_tasks(tasks, TaskFilters(completion="pending"))) == ["1", "2", "4", "5"]
    assert _ids(filter_tasks(tasks, TaskFilters(completion="overdue"), today=TODAY)) == ["4"]
    assert _ids(filter_tasks(tasks, TaskFilters(completion="bogus"))) == _ids(tasks)


def test_type_set_membership_and_empty_set() -> None:
    tasks = _sample()

    assert _ids(filter_tasks(tasks, TaskFilters(types=("event", "assignment")))) == ["3", "4"]
    assert _ids(filter_tasks(tasks, TaskFilters(types=()))) == _ids(tasks)


def test_due_on_day() -> None:
    assert _ids(filter_tasks(_sample(), TaskFilters(due_on=TODAY))) == ["5"]


def test_constraints_are_anded() -> None:
    combined = TaskFilters(tags=("exam",), types=("assignment",), completion="pending")

    assert _ids(filter_tasks(_sample(), combined)) == ["4"]


def test_filter_preserves_order_and_adding_constraints_never_grows() -> None:
    tasks = list(reversed(_sample()))
    loose = filter_tasks(tasks, TaskFilters(completion="pending"))
    tight = filter_tasks(tasks, TaskFilters(completion="pending", project="p-home"))

    assert _ids(loose) == ["5", "4", "2", "1"]
    assert len(tight) <= len(loose)
    assert set(_ids(tight)) <= set(_ids(loose))
