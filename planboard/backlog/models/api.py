"""API request / response schemas for the HTTP endpoints.

Request bodies are snake_case like the rest of the API.  Responses reuse the
domain models and are rendered with ``response_model_by_alias=False`` so the
camelCase storage aliases never leak into HTTP payloads.

- **Create** schemas validate user input and provide defaults.
- **Update** schemas allow partial updates via ``exclude_unset``.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from planboard.backlog.models.enums import TodoType
from planboard.backlog.models.todo import Todo
from planboard.backlog.models.workspace import Workspace


def _not_blank(value: str) -> str:
    if not value.strip():
        msg = "must not be blank"
        raise ValueError(msg)
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(BaseModel):
    """Input for creating a new workspace."""

    name: NonBlankStr


class WorkspaceRename(BaseModel):
    name: NonBlankStr


class WorkspaceListResponse(BaseModel):
    """All workspaces plus the currently active id."""

    workspaces: list[Workspace]
    active_workspace_id: str


# ---------------------------------------------------------------------------
# Todo
# ---------------------------------------------------------------------------


class TodoCreate(BaseModel):
    """Input for creating a todo at the end of its sibling list."""

    title: NonBlankStr = Field(description="May span several lines for tasks.")
    type: TodoType = TodoType.TASK
    parent_id: str | None = None


class TodoUpdate(BaseModel):
    """Partial update -- only fields explicitly set by the caller are applied.

    ``order`` is deliberately absent: positions change only through the
    reorder and move endpoints.
    """

    title: NonBlankStr | None = None
    type: TodoType | None = None
    completed: bool | None = None
    archived: bool | None = None
    parent_id: str | None = None


class TodoMove(BaseModel):
    """Re-parent a todo; ``index`` defaults to the end of the new sibling list."""

    parent_id: str | None = None
    index: int | None = Field(default=None, ge=0)


class TodoReorder(BaseModel):
    parent_id: str | None = None
    from_index: int
    to_index: int


class TodoDeleteResponse(BaseModel):
    deleted_ids: list[str]


class TodoNode(BaseModel):
    """Nested view of one todo and its non-archived descendants."""

    todo: Todo
    children: list[TodoNode] = Field(default_factory=list)
    completed_count: int = 0
    """Completed direct children."""

    total_count: int = 0
    """Non-archived direct children."""
