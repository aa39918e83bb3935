from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from .entities import TaskEntity
from .enums import DeletePolicy
from .errors import HierarchyError, TaskNotFoundError


def flatten(roots: Sequence[TaskEntity]) -> list[TaskEntity]:
    """Depth-first pre-order walk over a task forest.

    Uses an explicit stack so deeply nested subtasks never hit the
    recursion limit. The input is not modified.
    """
    result: list[TaskEntity] = []
    stack = list(reversed(roots or ()))
    while stack:
        task = stack.pop()
        result.append(task)
        if task.subtasks:
            stack.extend(reversed(task.subtasks))
    return result


def count_nodes(roots: Sequence[TaskEntity]) -> int:
    return len(flatten(roots))


class TaskIndex:
    """Id-keyed view of a task forest.

    Nodes are stored without their ``subtasks``; child order lives in
    ``_children`` and the nested tree is rebuilt on demand by ``roots()``.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, TaskEntity] = {}
        self._parent: dict[str, str | None] = {}
        self._children: dict[str | None, list[str]] = {None: []}

    @classmethod
    def from_forest(cls, roots: Sequence[TaskEntity]) -> "TaskIndex":
        index = cls()
        stack: list[tuple[TaskEntity, str | None]] = [(task, None) for task in reversed(roots)]
        while stack:
            task, parent_id = stack.pop()
            index._insert(task, parent_id)
            stack.extend((child, task.id) for child in reversed(task.subtasks))
        return index

    @classmethod
    def from_records(
        cls,
        records: Iterable[TaskEntity],
        positions: Mapping[str, int] | None = None,
    ) -> "TaskIndex":
        """Rebuild parent/child links from a flat record set keyed by ``parent_id``.

        Records whose parent is unknown become roots. A parent cycle is broken
        by promoting one of its members to a root, so no record is dropped.
        Siblings are ordered by ``positions`` (when given) and then by input
        order.
        """
        items = list(records)
        known = {task.id for task in items}
        order = {task.id: i for i, task in enumerate(items)}
        positions = positions or {}

        def _key(task: TaskEntity) -> tuple[int, int]:
            return positions.get(task.id, 0), order[task.id]

        by_parent: dict[str | None, list[TaskEntity]] = {}
        for task in items:
            parent_id = task.parent_id if task.parent_id in known else None
            if parent_id == task.id:
                parent_id = None
            by_parent.setdefault(parent_id, []).append(task)

        index = cls()

        def _attach(root: TaskEntity) -> None:
            stack: list[tuple[TaskEntity, str | None]] = [(root, None)]
            while stack:
                task, parent_id = stack.pop()
                index._insert(task, parent_id)
                children = sorted(by_parent.get(task.id, []), key=_key)
                stack.extend((child, task.id) for child in reversed(children) if child.id not in index)

        for root in sorted(by_parent.get(None, []), key=_key):
            _attach(root)
        # Whatever is still missing hangs off a parent cycle; cut the cycle
        # at the first member reached by walking up from the record.
        by_id = {task.id: task for task in items}
        for task in items:
            if task.id in index:
                continue
            seen: set[str] = set()
            node = task
            while node.id not in seen:
                seen.add(node.id)
                node = by_id[node.parent_id]
            _attach(node)
        return index

    def _insert(self, task: TaskEntity, parent_id: str | None) -> None:
        if task.id in self._nodes:
            raise HierarchyError(f"Task {task.id!r} appears more than once in the forest")
        self._nodes[task.id] = replace(task, parent_id=parent_id, subtasks=())
        self._parent[task.id] = parent_id
        self._children.setdefault(task.id, [])
        self._children.setdefault(parent_id, []).append(task.id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def _require(self, task_id: str) -> TaskEntity:
        try:
            return self._nodes[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    def get(self, task_id: str) -> TaskEntity:
        """Return the task with its current subtree attached."""
        self._require(task_id)
        return self._build(task_id)

    def parent_of(self, task_id: str) -> TaskEntity | None:
        self._require(task_id)
        parent_id = self._parent[task_id]
        return self._build(parent_id) if parent_id is not None else None

    def children_of(self, task_id: str) -> list[TaskEntity]:
        self._require(task_id)
        return [self._build(child_id) for child_id in self._children[task_id]]

    def ancestors(self, task_id: str) -> list[str]:
        """Ids from the direct parent up to the root."""
        self._require(task_id)
        chain = []
        current = self._parent[task_id]
        while current is not None:
            chain.append(current)
            current = self._parent[current]
        return chain

    def descendant_ids(self, task_id: str) -> list[str]:
        """Ids of every task below ``task_id`` in pre-order."""
        self._require(task_id)
        result: list[str] = []
        stack = list(reversed(self._children[task_id]))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self._children[current]))
        return result

    def add_task(self, task: TaskEntity) -> TaskEntity:
        if task.parent_id is not None:
            return self.add_subtask(task.parent_id, task)
        self._add(task, None)
        return self._build(task.id)

    def add_subtask(self, parent_id: str, task: TaskEntity) -> TaskEntity:
        self._require(parent_id)
        if task.id in self._nodes:
            if task.id == parent_id or task.id in self.ancestors(parent_id):
                raise HierarchyError(f"Task {task.id!r} cannot be nested under its own descendant")
            raise HierarchyError(f"Task {task.id!r} already exists")
        self._add(task, parent_id)
        return self._build(task.id)

    def _add(self, task: TaskEntity, parent_id: str | None) -> None:
        for node in flatten([task]):
            if node.id in self._nodes:
                raise HierarchyError(f"Task {node.id!r} already exists")
        stack: list[tuple[TaskEntity, str | None]] = [(task, parent_id)]
        while stack:
            node, node_parent = stack.pop()
            self._insert(node, node_parent)
            stack.extend((child, node.id) for child in reversed(node.subtasks))

    def update(self, task_id: str, **changes) -> TaskEntity:
        """Apply field changes to one node; structure fields are ignored."""
        current = self._require(task_id)
        changes.pop("id", None)
        changes.pop("parent_id", None)
        changes.pop("subtasks", None)
        self._nodes[task_id] = replace(current, **changes)
        return self._build(task_id)

    def move(self, task_id: str, new_parent_id: str | None) -> TaskEntity:
        self._require(task_id)
        if new_parent_id is not None:
            self._require(new_parent_id)
            if new_parent_id == task_id or task_id in self.ancestors(new_parent_id):
                raise HierarchyError(f"Task {task_id!r} cannot be nested under its own descendant")
        old_parent = self._parent[task_id]
        self._children[old_parent].remove(task_id)
        self._children.setdefault(new_parent_id, []).append(task_id)
        self._parent[task_id] = new_parent_id
        self._nodes[task_id] = replace(self._nodes[task_id], parent_id=new_parent_id)
        return self._build(task_id)

    def remove(self, task_id: str, policy: DeletePolicy | str = DeletePolicy.CASCADE) -> list[str]:
        """Detach ``task_id`` from its parent and delete it.

        Returns the ids actually removed. With ``ORPHAN`` the direct children
        are promoted to roots (keeping their own subtrees).
        """
        self._require(task_id)
        parent_id = self._parent[task_id]
        self._children[parent_id].remove(task_id)

        if DeletePolicy(policy) is DeletePolicy.ORPHAN:
            for child_id in self._children[task_id]:
                self._parent[child_id] = None
                self._nodes[child_id] = replace(self._nodes[child_id], parent_id=None)
                self._children[None].append(child_id)
            removed = [task_id]
        else:
            removed = [task_id, *self.descendant_ids(task_id)]

        for removed_id in removed:
            self._nodes.pop(removed_id, None)
            self._parent.pop(removed_id, None)
            self._children.pop(removed_id, None)
        return removed

    def _build(self, task_id: str) -> TaskEntity:
        # Post-order assembly without recursion.
        built: dict[str, TaskEntity] = {}
        stack: list[tuple[str, bool]] = [(task_id, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                children = tuple(built.pop(child) for child in self._children[current])
                built[current] = replace(self._nodes[current], subtasks=children)
                continue
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(self._children[current]))
        return built[task_id]

    def roots(self) -> list[TaskEntity]:
        return [self._build(task_id) for task_id in self._children[None]]

