from __future__ import annotations

from fastapi import APIRouter, Depends, status

from strain_api.api.dependencies import get_binder, get_current_principal, get_storage, get_submitter
from strain_api.config import settings
from strain_api.core.security import CredentialBinder
from strain_api.integrations.storage import GoogleStorage
from strain_api.schemas.auth import Principal
from strain_api.schemas.workflow import ComputeRequest, SubmittedWorkflow
from strain_api.services.workflow_submitter import WorkflowSubmitter

router = APIRouter()


@router.post("/", response_model=SubmittedWorkflow, status_code=status.HTTP_201_CREATED)
async def launch_computation(
    payload: ComputeRequest,
    principal: Principal = Depends(get_current_principal),
    binder: CredentialBinder = Depends(get_binder),
    storage: GoogleStorage = Depends(get_storage),
    submitter: WorkflowSubmitter = Depends(get_submitter),
) -> SubmittedWorkflow:
    client = binder.bound_client(principal.email)
    # Cromwell writes outputs to the project bucket; it must exist before the run starts.
    await storage.ensure_bucket(settings.project_id, settings.bucket_name, client.credentials())
    return await submitter.submit(principal.email, payload.algorithm, payload.inputs, client.refresh_token)
