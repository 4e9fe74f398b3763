"""Workspace data model.

A workspace is an isolated namespace holding one todo tree.  The workspace
with id ``default`` always exists and cannot be deleted.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from planboard.backlog.models.todo import now_ms

DEFAULT_WORKSPACE_ID = "default"
DEFAULT_WORKSPACE_NAME = "Personal"


def new_workspace_id() -> str:
    return f"workspace_{uuid.uuid4().hex[:12]}"


class Workspace(BaseModel):
    """Workspace entry in the persisted workspace list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_workspace_id)
    name: str
    created_at: int = Field(default_factory=now_ms, description="Epoch milliseconds.")

    @property
    def is_default(self) -> bool:
        return self.id == DEFAULT_WORKSPACE_ID
