"""Todo data model.

Todos form a forest through ``parent_id`` references into a flat list; no
todo holds a reference to another todo object.  The stored JSON keeps the
camelCase keys (``createdAt``, ``parentId``) of the browser-storage format
so exported data loads unchanged.
"""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from planboard.backlog.models.enums import TodoType


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_todo_id() -> str:
    return str(uuid.uuid4())


class Todo(BaseModel):
    """A single backlog item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=new_todo_id)
    title: str
    type: TodoType
    completed: bool = False
    archived: bool = False
    created_at: int = Field(default_factory=now_ms, description="Epoch milliseconds.")
    parent_id: str | None = None
    order: int = Field(default=0, ge=0)
