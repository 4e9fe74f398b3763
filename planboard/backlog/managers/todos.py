"""Todo collection for one workspace partition.

The tree is a flat list of ``Todo`` rows linked by ``parent_id``.  The one
structural invariant the manager maintains is sibling density: the
non-archived children of any parent carry ``order`` values ``0..n-1``.
Every operation that adds, removes, archives, restores or moves a node
re-indexes the sibling lists it touched.  Archived nodes keep their last
``order`` and are skipped when positions are computed.

Every mutation writes the whole collection back to the store before
returning.  Two processes editing the same partition resolve by
last-write-wins; call ``reload()`` to pick up another writer's changes.
"""

from __future__ import annotations

import json
from collections import deque
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from planboard.backlog.managers.persistence import PersistingManager
from planboard.backlog.models.enums import TodoType
from planboard.backlog.models.todo import Todo
from planboard.backlog.models.workspace import DEFAULT_WORKSPACE_ID
from planboard.backlog.store.base import LEGACY_TODOS_KEY, KeyValueStore, read_json_list, todos_key

_TODO_LIST = TypeAdapter(list[Todo])

_UPDATABLE_FIELDS = frozenset({"title", "type", "completed", "archived", "parent_id"})
_REQUIRED_FIELDS = _UPDATABLE_FIELDS - {"parent_id"}


class TodoNotFoundError(LookupError):
    """Raised when a todo is not found in the partition."""


class InvalidMoveError(ValueError):
    """Raised when a move would make a todo its own ancestor."""


def parse_todos(raw: list) -> list[Todo]:
    """Validate a decoded JSON list of todos.  Malformed input yields ``[]``."""
    try:
        return _TODO_LIST.validate_python(raw)
    except ValidationError as exc:
        logger.error("Discarding malformed todo list: {}", exc)
        return []


def _check_title(title: str) -> None:
    if not title.strip():
        msg = "Todo title must not be blank"
        raise ValueError(msg)


class TodoManager(PersistingManager):
    """CRUD, archive and ordering operations over one workspace's todos."""

    def __init__(self, store: KeyValueStore, workspace_id: str = DEFAULT_WORKSPACE_ID) -> None:
        super().__init__(store)
        self.workspace_id = workspace_id
        self._key = todos_key(workspace_id)
        self._todos: list[Todo] = []
        self.reload()

    # -- Persistence -----------------------------------------------------------

    def reload(self) -> None:
        """Replace the in-memory collection with what the store holds now."""
        raw = read_json_list(self._store, self._key)
        if raw is None and self.workspace_id == DEFAULT_WORKSPACE_ID:
            legacy = read_json_list(self._store, LEGACY_TODOS_KEY)
            if legacy:
                self._todos = parse_todos(legacy)
                logger.info("Migrated {} todos from {} into {}", len(self._todos), LEGACY_TODOS_KEY, self._key)
                self._persist()
                return
        self._todos = parse_todos(raw or [])

    def _persist(self) -> None:
        self._write(self._key, self.export_json(indent=None))

    def export_json(self, indent: int | None = 2) -> str:
        """Serialize the collection in the storage wire format (camelCase keys)."""
        return json.dumps([t.model_dump(mode="json", by_alias=True) for t in self._todos], indent=indent)

    def import_json(self, payload: str) -> int:
        """Replace the collection with a JSON export.  Returns the number of todos loaded.

        Raises ``ValueError`` if the payload is not a valid todo list.
        """
        try:
            decoded = json.loads(payload)
            todos = _TODO_LIST.validate_python(decoded)
        except (json.JSONDecodeError, ValidationError) as exc:
            msg = f"Invalid todo export: {exc}"
            raise ValueError(msg) from None
        self._todos = todos
        for parent_id in {t.parent_id for t in todos}:
            self._reindex(parent_id)
        self._persist()
        return len(todos)

    # -- Internal helpers ------------------------------------------------------

    def _find(self, todo_id: str) -> Todo | None:
        for todo in self._todos:
            if todo.id == todo_id:
                return todo
        return None

    def _require(self, todo_id: str) -> Todo:
        todo = self._find(todo_id)
        if todo is None:
            raise TodoNotFoundError(todo_id)
        return todo

    def _siblings(self, parent_id: str | None) -> list[Todo]:
        """Live non-archived children of ``parent_id`` in display order."""
        siblings = [t for t in self._todos if t.parent_id == parent_id and not t.archived]
        siblings.sort(key=lambda t: (t.order, t.created_at))
        return siblings

    def _reindex(self, parent_id: str | None) -> None:
        for index, todo in enumerate(self._siblings(parent_id)):
            todo.order = index

    def _descendant_ids(self, todo_id: str) -> set[str]:
        children: dict[str | None, list[str]] = {}
        for todo in self._todos:
            children.setdefault(todo.parent_id, []).append(todo.id)

        found: set[str] = set()
        queue = deque(children.get(todo_id, []))
        while queue:
            current = queue.popleft()
            # Parent references are not checked for cycles on write.
            if current in found or current == todo_id:
                continue
            found.add(current)
            queue.extend(children.get(current, []))
        return found

    def _place(self, todo: Todo, parent_id: str | None, index: int | None) -> None:
        """Detach ``todo`` from its sibling list and insert it under ``parent_id``."""
        if parent_id is not None:
            self._require(parent_id)
            if parent_id == todo.id or parent_id in self._descendant_ids(todo.id):
                msg = f"Cannot move {todo.id} under its own descendant {parent_id}"
                raise InvalidMoveError(msg)

        old_parent_id = todo.parent_id
        if todo.archived:
            todo.parent_id = parent_id
            self._reindex(old_parent_id)
            return

        siblings = [t for t in self._siblings(parent_id) if t.id != todo.id]
        if index is None or index > len(siblings):
            index = len(siblings)
        siblings.insert(index, todo)
        todo.parent_id = parent_id
        for position, sibling in enumerate(siblings):
            sibling.order = position
        if old_parent_id != parent_id:
            self._reindex(old_parent_id)

    # -- Query -----------------------------------------------------------------

    @property
    def todos(self) -> list[Todo]:
        """Snapshot of the whole collection in storage order."""
        return [t.model_copy() for t in self._todos]

    def get_todo(self, todo_id: str) -> Todo:
        """Get a todo by ID.  Raises ``TodoNotFoundError`` if missing."""
        return self._require(todo_id).model_copy()

    def get_children(self, parent_id: str | None, include_archived: bool = False) -> list[Todo]:
        """Children of ``parent_id`` (``None`` for top level) sorted by order."""
        children = [t for t in self._todos if t.parent_id == parent_id and (include_archived or not t.archived)]
        children.sort(key=lambda t: (t.order, t.created_at))
        return [t.model_copy() for t in children]

    def get_archived(self) -> list[Todo]:
        """All archived todos in the partition, newest first."""
        archived = sorted((t for t in self._todos if t.archived), key=lambda t: t.created_at, reverse=True)
        return [t.model_copy() for t in archived]

    def get_top_level(self, todo_type: TodoType, include_archived: bool = False) -> list[Todo]:
        return [t for t in self.get_children(None, include_archived) if t.type == todo_type]

    def get_projects(self, include_archived: bool = False) -> list[Todo]:
        return self.get_top_level(TodoType.PROJECT, include_archived)

    def get_epics(self, include_archived: bool = False) -> list[Todo]:
        return self.get_top_level(TodoType.EPIC, include_archived)

    def get_orphans(self) -> list[Todo]:
        """Todos whose parent reference resolves to nothing."""
        ids = {t.id for t in self._todos}
        return [t.model_copy() for t in self._todos if t.parent_id is not None and t.parent_id not in ids]

    def index_of(self, todo_id: str) -> int | None:
        """Position of a todo among its non-archived siblings, ``None`` if archived."""
        todo = self._require(todo_id)
        for position, sibling in enumerate(self._siblings(todo.parent_id)):
            if sibling.id == todo_id:
                return position
        return None

    # -- Mutation --------------------------------------------------------------

    def add_todo(self, title: str, todo_type: TodoType | str, parent_id: str | None = None) -> Todo:
        """Create a todo at the end of its sibling list."""
        _check_title(title)
        if parent_id is not None:
            self._require(parent_id)
        todo = Todo(
            title=title,
            type=TodoType(todo_type),
            parent_id=parent_id,
            order=len(self._siblings(parent_id)),
        )
        self._todos.append(todo)
        self._persist()
        logger.debug("Todo added: {} ({}, parent={})", todo.id, todo.type, parent_id)
        return todo.model_copy()

    def update_todo(self, todo_id: str, **changes: Any) -> Todo:
        """Shallow-merge ``changes`` into a todo.

        Accepts ``title``, ``type``, ``completed``, ``archived`` and
        ``parent_id``.  A new ``archived`` value or ``parent_id`` is applied
        through the same paths as archive/restore/move so sibling orders stay
        dense.
        """
        todo = self._require(todo_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Cannot update field(s): {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        nulls = sorted(k for k, v in changes.items() if v is None and k in _REQUIRED_FIELDS)
        if nulls:
            msg = f"Field(s) cannot be null: {', '.join(nulls)}"
            raise ValueError(msg)

        # Validate every change before touching the tree; ValidationError is a ValueError.
        candidate = Todo.model_validate(todo.model_dump() | changes)
        changes = {key: getattr(candidate, key) for key in changes}
        if "title" in changes:
            _check_title(changes["title"])

        if "parent_id" in changes:
            parent_id = changes.pop("parent_id")
            if parent_id != todo.parent_id:
                self._place(todo, parent_id, None)

        archived = changes.pop("archived", None)
        for key, value in changes.items():
            setattr(todo, key, value)

        if archived is not None and archived != todo.archived:
            if archived:
                todo.archived = True
                self._reindex(todo.parent_id)
            else:
                # Restored items go to the end; their old slot may be taken.
                todo.order = len(self._siblings(todo.parent_id))
                todo.archived = False

        self._persist()
        return todo.model_copy()

    def delete_todo(self, todo_id: str) -> list[str]:
        """Permanently delete a todo and all of its descendants.

        Returns the ids that were removed.  Siblings of the deleted todo are
        re-indexed.
        """
        todo = self._require(todo_id)
        doomed = self._descendant_ids(todo_id) | {todo_id}
        removed = [t.id for t in self._todos if t.id in doomed]
        self._todos = [t for t in self._todos if t.id not in doomed]
        self._reindex(todo.parent_id)
        self._persist()
        logger.info("Todo deleted: {} ({} descendants)", todo_id, len(removed) - 1)
        return removed

    def archive_todo(self, todo_id: str) -> Todo:
        """Hide a todo from sibling lists; its descendants stay attached."""
        return self.update_todo(todo_id, archived=True)

    def restore_todo(self, todo_id: str) -> Todo:
        return self.update_todo(todo_id, archived=False)

    def toggle_complete(self, todo_id: str) -> Todo:
        todo = self._require(todo_id)
        todo.completed = not todo.completed
        self._persist()
        return todo.model_copy()

    def reorder_todos(self, parent_id: str | None, from_index: int, to_index: int) -> bool:
        """Move the sibling at ``from_index`` to ``to_index`` (list splice semantics).

        Indices refer to the non-archived children of ``parent_id`` sorted
        by order.  Out-of-range indices leave everything untouched and
        return ``False``.
        """
        siblings = self._siblings(parent_id)
        if not (0 <= from_index < len(siblings)) or not (0 <= to_index < len(siblings)):
            logger.debug(
                "Reorder ignored: indices {}->{} out of range for {} siblings", from_index, to_index, len(siblings)
            )
            return False

        moved = siblings.pop(from_index)
        siblings.insert(to_index, moved)
        for position, sibling in enumerate(siblings):
            sibling.order = position
        self._persist()
        return True

    def move_todo(self, todo_id: str, new_parent_id: str | None, index: int | None = None) -> Todo:
        """Re-parent a todo, inserting it at ``index`` among its new siblings.

        ``index`` defaults to the end and is clamped to the sibling count.
        Raises ``InvalidMoveError`` if ``new_parent_id`` is the todo itself or
        one of its descendants.
        """
        todo = self._require(todo_id)
        if index is not None and index < 0:
            msg = f"Negative index: {index}"
            raise ValueError(msg)
        self._place(todo, new_parent_id, index)
        self._persist()
        return todo.model_copy()
