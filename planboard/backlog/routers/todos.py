"""Todo endpoints for one workspace (RPC-style).

All write operations use POST; reads use GET.  Every route is scoped to
``/workspaces/{workspace_id}/todos``; an unknown workspace is a 404.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, HTTPException, status

from planboard.backlog import views
from planboard.backlog.deps import Todos
from planboard.backlog.managers.todos import InvalidMoveError, TodoNotFoundError
from planboard.backlog.models.api import (
    TodoCreate,
    TodoDeleteResponse,
    TodoMove,
    TodoNode,
    TodoReorder,
    TodoUpdate,
)
from planboard.backlog.models.todo import Todo

router = APIRouter(prefix="/workspaces/{workspace_id}/todos", tags=["todos"])


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate manager exceptions into HTTP errors."""
    try:
        yield
    except TodoNotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Todo '{exc.args[0]}' not found.") from None
    except InvalidMoveError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from None
    except ValueError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None


# -- Reads -------------------------------------------------------------------


@router.get("/list", response_model=list[Todo], response_model_by_alias=False)
async def list_todos(
    todos: Todos,
    parent_id: str | None = None,
    include_archived: bool = False,
) -> list[Todo]:
    """List the children of ``parent_id`` (top level when omitted), by order."""
    return todos.get_children(parent_id, include_archived)


@router.get("/tree", response_model=list[TodoNode], response_model_by_alias=False)
async def get_tree(todos: Todos) -> list[TodoNode]:
    """Nested view of all non-archived todos."""
    return views.compose_tree(todos)


@router.get("/archived", response_model=list[Todo], response_model_by_alias=False)
async def list_archived(todos: Todos) -> list[Todo]:
    """All archived todos, newest first."""
    return todos.get_archived()


@router.get("/{todo_id}/get", response_model=TodoNode, response_model_by_alias=False)
async def get_todo(todo_id: str, todos: Todos) -> TodoNode:
    """A single todo with its non-archived descendants."""
    with _domain_errors():
        return views.compose_subtree(todos, todo_id)


# -- Writes ------------------------------------------------------------------


@router.post(
    "/create",
    response_model=Todo,
    response_model_by_alias=False,
    status_code=status.HTTP_201_CREATED,
)
async def create_todo(body: TodoCreate, todos: Todos) -> Todo:
    """Create a todo at the end of its parent's list."""
    with _domain_errors():
        return todos.add_todo(body.title, body.type, body.parent_id)


@router.post("/{todo_id}/update", response_model=Todo, response_model_by_alias=False)
async def update_todo(todo_id: str, body: TodoUpdate, todos: Todos) -> Todo:
    """Partially update a todo."""
    with _domain_errors():
        return todos.update_todo(todo_id, **body.model_dump(exclude_unset=True))


@router.post("/{todo_id}/delete", response_model=TodoDeleteResponse)
async def delete_todo(todo_id: str, todos: Todos) -> TodoDeleteResponse:
    """Permanently delete a todo and everything beneath it."""
    with _domain_errors():
        return TodoDeleteResponse(deleted_ids=todos.delete_todo(todo_id))


@router.post("/{todo_id}/archive", response_model=Todo, response_model_by_alias=False)
async def archive_todo(todo_id: str, todos: Todos) -> Todo:
    with _domain_errors():
        return todos.archive_todo(todo_id)


@router.post("/{todo_id}/restore", response_model=Todo, response_model_by_alias=False)
async def restore_todo(todo_id: str, todos: Todos) -> Todo:
    with _domain_errors():
        return todos.restore_todo(todo_id)


@router.post("/{todo_id}/toggle", response_model=Todo, response_model_by_alias=False)
async def toggle_todo(todo_id: str, todos: Todos) -> Todo:
    """Flip the completed flag."""
    with _domain_errors():
        return todos.toggle_complete(todo_id)


@router.post("/{todo_id}/move", response_model=Todo, response_model_by_alias=False)
async def move_todo(todo_id: str, body: TodoMove, todos: Todos) -> Todo:
    """Re-parent a todo, optionally at a given position among its new siblings."""
    with _domain_errors():
        return todos.move_todo(todo_id, body.parent_id, body.index)


@router.post("/reorder", response_model=list[Todo], response_model_by_alias=False)
async def reorder_todos(body: TodoReorder, todos: Todos) -> list[Todo]:
    """Move one sibling to a new position; returns the sibling list afterwards.

    Out-of-range indices change nothing and return the current list.
    """
    todos.reorder_todos(body.parent_id, body.from_index, body.to_index)
    return todos.get_children(body.parent_id)
