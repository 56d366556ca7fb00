"""Shared API dependencies: persistence, injected clients, and the signed-in principal."""
from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from strain_api.config import settings
from strain_api.core.security import CredentialBinder
from strain_api.database import get_db
from strain_api.integrations.cromwell import CromwellClient
from strain_api.integrations.storage import GoogleStorage
from strain_api.schemas.auth import Principal
from strain_api.services.decoders import DecoderRegistry
from strain_api.services.resources import AlgorithmResources
from strain_api.services.results import ResultRetriever
from strain_api.services.status_sync import StatusSynchronizer
from strain_api.services.workflow_store import WorkflowStore
from strain_api.services.workflow_submitter import WorkflowSubmitter

AUTH_SCHEME = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> WorkflowStore:
    return WorkflowStore(db)


def get_cromwell(request: Request) -> CromwellClient:
    return request.app.state.cromwell


def get_storage(request: Request) -> GoogleStorage:
    return request.app.state.storage


def get_resources(request: Request) -> AlgorithmResources:
    return request.app.state.resources


def get_decoders(request: Request) -> DecoderRegistry:
    return request.app.state.decoders


def get_binder(store: WorkflowStore = Depends(get_store)) -> CredentialBinder:
    return CredentialBinder(
        store,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret.get_secret_value(),
    )


async def get_current_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(AUTH_SCHEME),
    binder: CredentialBinder = Depends(get_binder),
) -> Principal:
    return await binder.resolve_principal(creds.credentials if creds else None)


def get_submitter(
    store: WorkflowStore = Depends(get_store),
    engine: CromwellClient = Depends(get_cromwell),
    resources: AlgorithmResources = Depends(get_resources),
) -> WorkflowSubmitter:
    return WorkflowSubmitter(
        store,
        engine,
        resources,
        project_id=settings.project_id,
        workflow_type_version=settings.workflow_type_version,
    )


def get_status_sync(
    store: WorkflowStore = Depends(get_store),
    engine: CromwellClient = Depends(get_cromwell),
) -> StatusSynchronizer:
    return StatusSynchronizer(store, engine)


def get_result_retriever(
    binder: CredentialBinder = Depends(get_binder),
    storage: GoogleStorage = Depends(get_storage),
    decoders: DecoderRegistry = Depends(get_decoders),
) -> ResultRetriever:
    return ResultRetriever(binder, storage, decoders)
