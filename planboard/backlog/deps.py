"""FastAPI dependency injection for storage and managers.

Usage in route handlers::

    @router.post("/things")
    async def create_thing(todos: Todos, body: ThingCreate) -> Todo:
        ...

Managers are built per request from the shared key-value store, so each
request sees whatever the last writer (in any process) stored.  Managers
created here are remembered on ``request.state`` so the app can flag
responses whose writes only reached memory.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from planboard.backlog.managers.todos import TodoManager
from planboard.backlog.managers.workspaces import WorkspaceManager
from planboard.backlog.store.base import KeyValueStore


def get_store(request: Request) -> KeyValueStore:
    """Return the shared key-value store set up during lifespan."""
    store: KeyValueStore | None = request.app.state.store
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage not initialised.",
        )
    return store


def _track(request: Request, manager: object) -> None:
    if not hasattr(request.state, "managers"):
        request.state.managers = []
    request.state.managers.append(manager)


def get_workspace_manager(request: Request, store: Annotated[KeyValueStore, Depends(get_store)]) -> WorkspaceManager:
    manager = WorkspaceManager(store)
    _track(request, manager)
    return manager


def get_todo_manager(
    workspace_id: str,
    request: Request,
    workspaces: Annotated[WorkspaceManager, Depends(get_workspace_manager)],
) -> TodoManager:
    """Todo manager for the workspace named in the path.  404 if unknown."""
    if not workspaces.exists(workspace_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace '{workspace_id}' not found.")
    manager = TodoManager(workspaces.store, workspace_id)
    _track(request, manager)
    return manager


# -- Annotated type aliases for concise route signatures ---------------------

Store = Annotated[KeyValueStore, Depends(get_store)]
"""Annotated dependency: shared key-value store."""

Workspaces = Annotated[WorkspaceManager, Depends(get_workspace_manager)]
"""Annotated dependency: workspace manager loaded for this request."""

Todos = Annotated[TodoManager, Depends(get_todo_manager)]
"""Annotated dependency: todo manager for ``{workspace_id}`` in the path."""
