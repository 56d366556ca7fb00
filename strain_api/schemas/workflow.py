from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TERMINAL_STATUSES = frozenset({"Succeeded", "Failed", "Aborted"})


class WorkflowSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    workflow_id: str
    submitted: datetime
    finished: datetime | None = None
    algorithm: str
    species: str | None = None
    project_id: str | None = None
    sample_name: str | None = None
    single: bool | None = None
    status: str = "Submitted"


class SubmittedWorkflow(WorkflowSchema):
    """A workflow record with the reference tree for its species attached."""

    nwk_tree: str = ""


class ComputeRequest(BaseModel):
    algorithm: str = Field(min_length=1)
    inputs: dict[str, Any] = Field(default_factory=dict)


class AbortRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    workflow_id: str = Field(min_length=1)
