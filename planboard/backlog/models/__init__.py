"""Data models for the backlog."""

from planboard.backlog.models.api import (
    TodoCreate,
    TodoDeleteResponse,
    TodoMove,
    TodoNode,
    TodoReorder,
    TodoUpdate,
    WorkspaceCreate,
    WorkspaceListResponse,
    WorkspaceRename,
)
from planboard.backlog.models.enums import DragState, DropOutcome, TodoType
from planboard.backlog.models.todo import Todo
from planboard.backlog.models.workspace import DEFAULT_WORKSPACE_ID, DEFAULT_WORKSPACE_NAME, Workspace

__all__ = [
    "DEFAULT_WORKSPACE_ID",
    "DEFAULT_WORKSPACE_NAME",
    # Enums
    "DragState",
    "DropOutcome",
    # Domain
    "Todo",
    # API schemas
    "TodoCreate",
    "TodoDeleteResponse",
    "TodoMove",
    "TodoNode",
    "TodoReorder",
    "TodoType",
    "TodoUpdate",
    "Workspace",
    "WorkspaceCreate",
    "WorkspaceListResponse",
    "WorkspaceRename",
]
