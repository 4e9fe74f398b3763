"""Drag-and-drop gesture tracking.

Translates a drag gesture into at most one store mutation.  Hover events
only move a transient drop indicator; the store is touched on drop.

States::

    IDLE --start()--> DRAGGING --drop() / cancel()--> IDLE
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from planboard.backlog.managers.todos import TodoManager
from planboard.backlog.models.enums import DragState, DropOutcome


@dataclass(frozen=True)
class DragOrigin:
    item_id: str
    parent_id: str | None
    index: int


class DragReorderController:
    """Gesture state for one list view.

    A drop on the origin's sibling list reorders; a drop under another
    parent re-parents the item at the drop position.
    """

    def __init__(self, manager: TodoManager) -> None:
        self._manager = manager
        self._origin: DragOrigin | None = None
        self._indicator: int | None = None
        self._enter_depth = 0

    # -- Query -----------------------------------------------------------------

    @property
    def state(self) -> DragState:
        return DragState.IDLE if self._origin is None else DragState.DRAGGING

    @property
    def origin(self) -> DragOrigin | None:
        return self._origin

    @property
    def drop_indicator(self) -> int | None:
        """Sibling index currently highlighted as the drop position."""
        return self._indicator

    # -- Gesture ---------------------------------------------------------------

    def start(self, item_id: str) -> DragOrigin:
        """Begin dragging ``item_id``.  Replaces any gesture already in progress.

        Raises ``TodoNotFoundError`` for unknown ids and ``ValueError`` for
        archived todos, which have no position to drag from.
        """
        todo = self._manager.get_todo(item_id)
        index = self._manager.index_of(item_id)
        if index is None:
            msg = f"Cannot drag archived todo {item_id}"
            raise ValueError(msg)
        self._reset()
        self._origin = DragOrigin(item_id=item_id, parent_id=todo.parent_id, index=index)
        logger.debug("Drag started: {} (parent={}, index={})", item_id, todo.parent_id, index)
        return self._origin

    def hover_enter(self, index: int) -> None:
        if self._origin is None:
            return
        self._enter_depth += 1
        self._indicator = index

    def hover_leave(self) -> None:
        if self._origin is None:
            return
        self._enter_depth = max(self._enter_depth - 1, 0)
        if self._enter_depth == 0:
            self._indicator = None

    def drop(self, parent_id: str | None, index: int) -> DropOutcome:
        """Finish the gesture at ``index`` under ``parent_id``.

        Issues at most one store call and always returns to ``IDLE``.
        """
        origin = self._origin
        self._reset()
        if origin is None:
            return DropOutcome.IGNORED

        if origin.parent_id == parent_id:
            if origin.index == index:
                return DropOutcome.UNCHANGED
            if self._manager.reorder_todos(parent_id, origin.index, index):
                return DropOutcome.REORDERED
            return DropOutcome.UNCHANGED

        self._manager.move_todo(origin.item_id, parent_id, index)
        return DropOutcome.MOVED

    def cancel(self) -> None:
        """Abandon the gesture (drag-end without a drop)."""
        self._reset()

    def _reset(self) -> None:
        self._origin = None
        self._indicator = None
        self._enter_depth = 0
