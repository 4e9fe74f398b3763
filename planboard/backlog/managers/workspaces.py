"""Workspace list and active-workspace selection.

Both values are written after every mutation.  They live under separate
keys, so a crash between the two writes can leave a stale active id; the
loader falls back to the default workspace when that happens.
"""

from __future__ import annotations

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from planboard.backlog.managers.persistence import PersistingManager
from planboard.backlog.models.workspace import DEFAULT_WORKSPACE_ID, DEFAULT_WORKSPACE_NAME, Workspace
from planboard.backlog.store.base import (
    ACTIVE_WORKSPACE_KEY,
    WORKSPACES_KEY,
    KeyValueStore,
    read_json_list,
    todos_key,
)

_WORKSPACE_LIST = TypeAdapter(list[Workspace])


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is not found."""


class DefaultWorkspaceError(ValueError):
    """Raised when attempting to delete the reserved default workspace."""


class WorkspaceManager(PersistingManager):
    """Owns the workspace list and the id of the active workspace."""

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store)
        self._workspaces = self._load_workspaces()
        dirty = False

        if self._find(DEFAULT_WORKSPACE_ID) is None:
            self._workspaces.insert(0, Workspace(id=DEFAULT_WORKSPACE_ID, name=DEFAULT_WORKSPACE_NAME))
            dirty = True

        saved_active = self._load_active_id()
        if saved_active and self._find(saved_active) is not None:
            self._active_id = saved_active
        else:
            self._active_id = DEFAULT_WORKSPACE_ID
            dirty = dirty or saved_active != DEFAULT_WORKSPACE_ID

        if dirty:
            self._persist()

    def _load_workspaces(self) -> list[Workspace]:
        raw = read_json_list(self._store, WORKSPACES_KEY)
        if not raw:
            return []
        try:
            return _WORKSPACE_LIST.validate_python(raw)
        except ValidationError as exc:
            logger.error("Discarding malformed workspace list: {}", exc)
            return []

    def _load_active_id(self) -> str | None:
        try:
            return self._store.read(ACTIVE_WORKSPACE_KEY)
        except UnicodeDecodeError as exc:
            logger.error("Discarding unreadable {}: {}", ACTIVE_WORKSPACE_KEY, exc)
            return None

    def _persist(self) -> None:
        payload = _WORKSPACE_LIST.dump_json(self._workspaces, by_alias=True).decode()
        self._write_many({WORKSPACES_KEY: payload, ACTIVE_WORKSPACE_KEY: self._active_id})

    def _find(self, workspace_id: str) -> Workspace | None:
        for ws in self._workspaces:
            if ws.id == workspace_id:
                return ws
        return None

    # -- Query -----------------------------------------------------------------

    def list_workspaces(self) -> list[Workspace]:
        """Return the workspaces in creation order (default first)."""
        return [ws.model_copy() for ws in self._workspaces]

    def get_workspace(self, workspace_id: str) -> Workspace:
        """Get a workspace by ID.  Raises ``WorkspaceNotFoundError`` if missing."""
        ws = self._find(workspace_id)
        if ws is None:
            raise WorkspaceNotFoundError(workspace_id)
        return ws.model_copy()

    def exists(self, workspace_id: str) -> bool:
        return self._find(workspace_id) is not None

    @property
    def active_workspace_id(self) -> str:
        return self._active_id

    def get_active_workspace(self) -> Workspace:
        return self.get_workspace(self._active_id)

    # -- Mutation --------------------------------------------------------------

    def create_workspace(self, name: str) -> Workspace:
        """Append a new workspace with a fresh id.  Names need not be unique."""
        if not name.strip():
            msg = "Workspace name must not be blank"
            raise ValueError(msg)
        ws = Workspace(name=name)
        while self._find(ws.id) is not None:
            ws = Workspace(name=name)
        self._workspaces.append(ws)
        self._persist()
        logger.info("Workspace created: {} ({})", ws.id, name)
        return ws.model_copy()

    def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace | None:
        """Rename a workspace.  Returns ``None`` (and changes nothing) if unknown."""
        if not new_name.strip():
            msg = "Workspace name must not be blank"
            raise ValueError(msg)
        ws = self._find(workspace_id)
        if ws is None:
            logger.debug("Rename ignored, no workspace {}", workspace_id)
            return None
        ws.name = new_name
        self._persist()
        return ws.model_copy()

    def delete_workspace(self, workspace_id: str) -> bool:
        """Delete a workspace and its todo partition.

        Raises ``DefaultWorkspaceError`` for the default workspace.  Returns
        ``False`` if no such workspace exists.  Deleting the active workspace
        makes the default workspace active.
        """
        if workspace_id == DEFAULT_WORKSPACE_ID:
            logger.warning("Refusing to delete the default workspace")
            raise DefaultWorkspaceError(workspace_id)

        ws = self._find(workspace_id)
        if ws is None:
            logger.debug("Delete ignored, no workspace {}", workspace_id)
            return False

        self._workspaces.remove(ws)
        if self._active_id == workspace_id:
            self._active_id = DEFAULT_WORKSPACE_ID
        self._persist()
        self._store.delete(todos_key(workspace_id))
        logger.info("Workspace deleted: {}", workspace_id)
        return True

    def switch_workspace(self, workspace_id: str) -> bool:
        """Make ``workspace_id`` active.  Returns ``False`` if it does not exist."""
        if self._find(workspace_id) is None:
            logger.debug("Switch ignored, no workspace {}", workspace_id)
            return False
        self._active_id = workspace_id
        self._persist()
        return True
