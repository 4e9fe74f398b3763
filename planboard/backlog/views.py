"""Read-side projections of the flat todo collection.

Nothing here holds state: every function recomputes its result from the
manager's current collection, so a view is never staler than the call that
built it.  Nested views are derived by filtering on ``parent_id``; no todo
object ever points at another.
"""

from __future__ import annotations

from planboard.backlog.managers.todos import TodoManager
from planboard.backlog.models.api import TodoNode
from planboard.backlog.models.enums import TodoType
from planboard.backlog.models.todo import Todo

_TYPE_LABELS = {
    TodoType.PROJECT: "Project",
    TodoType.EPIC: "Epic",
    TodoType.STORY: "Story",
    TodoType.TASK: "Task",
}


def _build_node(manager: TodoManager, todo: Todo, seen: set[str]) -> TodoNode:
    seen.add(todo.id)
    children = [c for c in manager.get_children(todo.id) if c.id not in seen]
    child_nodes = [_build_node(manager, child, seen) for child in children]
    return TodoNode(
        todo=todo,
        children=child_nodes,
        completed_count=sum(1 for c in children if c.completed),
        total_count=len(children),
    )


def compose_tree(manager: TodoManager) -> list[TodoNode]:
    """Nest every non-archived top-level todo with its non-archived descendants.

    Each level is ordered by ``order``.  Children of an archived todo are
    not shown; they reappear when the parent is restored.
    """
    seen: set[str] = set()
    return [_build_node(manager, root, seen) for root in manager.get_children(None)]


def compose_subtree(manager: TodoManager, todo_id: str) -> TodoNode:
    """Nest a single todo (archived or not) with its non-archived descendants."""
    return _build_node(manager, manager.get_todo(todo_id), set())


def group_archived(manager: TodoManager) -> dict[TodoType, list[Todo]]:
    """Archived todos grouped by type, each group newest first.

    Groups appear outermost level first; empty groups are omitted.
    """
    archived = manager.get_archived()
    groups: dict[TodoType, list[Todo]] = {}
    for todo_type in TodoType:
        items = [t for t in archived if t.type == todo_type]
        if items:
            groups[todo_type] = items
    return groups


def _format_todo(todo: Todo) -> list[str]:
    mark = "x" if todo.completed else " "
    lines = todo.title.splitlines() or [""]
    head = f"[{mark}] {_TYPE_LABELS[todo.type]}: {lines[0]}  ({todo.id})"
    # Continuation lines of multi-line task titles hang under the title text.
    return [head, *(f"    {line}" for line in lines[1:])]


def render_tree(nodes: list[TodoNode], indent: str = "  ") -> str:
    """Plain-text outline of a composed tree, one todo per line."""
    out: list[str] = []

    def walk(node: TodoNode, depth: int) -> None:
        prefix = indent * depth
        head, *rest = _format_todo(node.todo)
        if node.total_count:
            head = f"{head}  {node.completed_count}/{node.total_count}"
        out.append(prefix + head)
        out.extend(prefix + line for line in rest)
        for child in node.children:
            walk(child, depth + 1)

    for node in nodes:
        walk(node, 0)
    return "\n".join(out)


def render_archive(groups: dict[TodoType, list[Todo]]) -> str:
    out: list[str] = []
    for todo_type, items in groups.items():
        out.append(f"{_TYPE_LABELS[todo_type]} ({len(items)})")
        for todo in items:
            out.extend(f"  {line}" for line in _format_todo(todo))
    return "\n".join(out)
