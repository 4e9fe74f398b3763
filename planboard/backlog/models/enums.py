"""Shared enumerations used across the backlog."""

from __future__ import annotations

from enum import StrEnum

# -- Todo --------------------------------------------------------------------


class TodoType(StrEnum):
    """Backlog levels, outermost first.

    The containment order is a convention of the views; the store does not
    check that a story sits under an epic.
    """

    PROJECT = "project"
    EPIC = "epic"
    STORY = "story"
    TASK = "task"


# -- Drag and drop -----------------------------------------------------------


class DragState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DropOutcome(StrEnum):
    """What a drop gesture did to the store."""

    REORDERED = "reordered"
    MOVED = "moved"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"
