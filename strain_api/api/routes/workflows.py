from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from strain_api.api.dependencies import (
    get_cromwell,
    get_current_principal,
    get_resources,
    get_status_sync,
    get_store,
)
from strain_api.integrations.cromwell import CromwellClient
from strain_api.schemas.auth import Principal
from strain_api.schemas.workflow import AbortRequest, SubmittedWorkflow
from strain_api.services.resources import AlgorithmResources
from strain_api.services.status_sync import StatusSynchronizer
from strain_api.services.workflow_store import WorkflowStore

router = APIRouter()


@router.get("/", response_model=list[SubmittedWorkflow])
async def list_user_workflows(
    principal: Principal = Depends(get_current_principal),
    store: WorkflowStore = Depends(get_store),
    resources: AlgorithmResources = Depends(get_resources),
) -> list[SubmittedWorkflow]:
    """The user's workflows, newest first, each with its species tree attached."""
    workflows = store.list_workflows(principal.email)
    return [
        SubmittedWorkflow(**workflow.model_dump(), nwk_tree=resources.phylo_tree(workflow.species))
        for workflow in reversed(workflows)
    ]


@router.get("/{workflow_id}/status")
async def workflow_status(
    workflow_id: str,
    principal: Principal = Depends(get_current_principal),
    synchronizer: StatusSynchronizer = Depends(get_status_sync),
) -> dict[str, str]:
    status = await synchronizer.get_status(principal.email, workflow_id)
    return {"workflowId": workflow_id, "status": status}


@router.get("/{workflow_id}/outputs")
async def workflow_outputs(
    workflow_id: str,
    principal: Principal = Depends(get_current_principal),
    engine: CromwellClient = Depends(get_cromwell),
) -> dict[str, Any]:
    """Outputs Cromwell has so far, even for unfinished workflows."""
    return await engine.outputs(workflow_id)


@router.post("/abort")
async def abort_workflow(
    payload: AbortRequest,
    principal: Principal = Depends(get_current_principal),
    engine: CromwellClient = Depends(get_cromwell),
) -> dict[str, Any]:
    return await engine.abort(payload.workflow_id)
