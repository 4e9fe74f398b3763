"""Workspace endpoints (RPC-style).

All write operations use POST; reads use GET.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from planboard.backlog.deps import Workspaces
from planboard.backlog.managers.workspaces import DefaultWorkspaceError
from planboard.backlog.models.api import WorkspaceCreate, WorkspaceListResponse, WorkspaceRename
from planboard.backlog.models.workspace import Workspace

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get("/list", response_model=WorkspaceListResponse, response_model_by_alias=False)
async def list_workspaces(workspaces: Workspaces) -> WorkspaceListResponse:
    """List all workspaces (default first) and the active workspace id."""
    return WorkspaceListResponse(
        workspaces=workspaces.list_workspaces(),
        active_workspace_id=workspaces.active_workspace_id,
    )


@router.get("/active", response_model=Workspace, response_model_by_alias=False)
async def get_active_workspace(workspaces: Workspaces) -> Workspace:
    return workspaces.get_active_workspace()


@router.post(
    "/create",
    response_model=Workspace,
    response_model_by_alias=False,
    status_code=status.HTTP_201_CREATED,
)
async def create_workspace(body: WorkspaceCreate, workspaces: Workspaces) -> Workspace:
    """Create a new workspace.  Names need not be unique."""
    return workspaces.create_workspace(body.name)


@router.post("/{workspace_id}/rename", response_model=Workspace, response_model_by_alias=False)
async def rename_workspace(workspace_id: str, body: WorkspaceRename, workspaces: Workspaces) -> Workspace:
    workspace = workspaces.rename_workspace(workspace_id, body.name)
    if workspace is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace '{workspace_id}' not found.")
    return workspace


@router.post("/{workspace_id}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(workspace_id: str, workspaces: Workspaces) -> None:
    """Delete a workspace and its todos.  The default workspace cannot be deleted."""
    try:
        deleted = workspaces.delete_workspace(workspace_id)
    except DefaultWorkspaceError:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="The default workspace cannot be deleted.") from None
    if not deleted:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace '{workspace_id}' not found.")


@router.post("/{workspace_id}/switch", response_model=Workspace, response_model_by_alias=False)
async def switch_workspace(workspace_id: str, workspaces: Workspaces) -> Workspace:
    """Make a workspace the active one."""
    if not workspaces.switch_workspace(workspace_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace '{workspace_id}' not found.")
    return workspaces.get_active_workspace()
