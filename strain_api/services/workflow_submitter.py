from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from strain_api.core.exceptions import (
    AuthError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    SubmissionConflictError,
)
from strain_api.integrations.cromwell import CromwellClient
from strain_api.schemas.workflow import SubmittedWorkflow, WorkflowSchema
from strain_api.services.resources import AlgorithmResources
from strain_api.services.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class WorkflowSubmitter:
    """Submits algorithm runs to Cromwell and records them in the user's history."""

    def __init__(
        self,
        store: WorkflowStore,
        engine: CromwellClient,
        resources: AlgorithmResources,
        project_id: str,
        workflow_type_version: str = "draft-2",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.engine = engine
        self.resources = resources
        self.project_id = project_id
        self.workflow_type_version = workflow_type_version
        self._clock = clock

    def build_options(self, credential: str) -> dict[str, Any]:
        # Cromwell uses the user's refresh token to act on their behalf against storage.
        return {"refresh_token": credential}

    async def submit(
        self,
        email: str,
        algorithm: str,
        inputs: dict[str, Any],
        credential: str | None,
    ) -> SubmittedWorkflow:
        if not credential:
            raise AuthError("Error: no refresh_token")
        workflow_source = self.resources.workflow_source(algorithm)
        if workflow_source is None:
            raise NotFoundError(f"Unknown algorithm: {algorithm}")

        try:
            pending = WorkflowSchema(
                workflow_id="pending",
                submitted=self._clock(),
                finished=None,
                algorithm=algorithm,
                species=_optional_str(inputs.get(f"{algorithm}.referenceSpecies")),
                project_id=self.project_id,
                sample_name=_optional_str(inputs.get(f"{algorithm}.accession")),
                single=inputs.get(f"{algorithm}.single"),
                status="Submitted",
            )
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid inputs for {algorithm}: {exc.error_count()} error(s)") from exc

        workflow_id = await self.engine.submit(
            workflow_source,
            inputs,
            self.build_options(credential),
            workflow_type="WDL",
            workflow_type_version=self.workflow_type_version,
        )
        logger.info("Cromwell accepted %s workflow %s for %s", algorithm, workflow_id, email)

        workflow = pending.model_copy(update={"workflow_id": workflow_id, "submitted": self._clock()})
        try:
            stored = self.store.append_workflow(email, workflow)
        except ConflictError as exc:
            logger.error(
                "Workflow %s is running in Cromwell but is already recorded for %s",
                workflow_id,
                email,
            )
            raise SubmissionConflictError(workflow_id) from exc

        return SubmittedWorkflow(
            **stored.model_dump(),
            nwk_tree=self.resources.phylo_tree(stored.species),
        )
