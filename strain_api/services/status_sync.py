from __future__ import annotations

import logging

from strain_api.core.exceptions import NotFoundError, UpstreamError
from strain_api.integrations.cromwell import CromwellClient
from strain_api.schemas.workflow import TERMINAL_STATUSES
from strain_api.services.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)


class StatusSynchronizer:
    """
    Reconciles the stored status of a workflow with what Cromwell reports.

    Cromwell is the source of truth. When it cannot be asked, the stored
    status is returned as-is so a failed poll never touches local state.
    """

    def __init__(self, store: WorkflowStore, engine: CromwellClient):
        self.store = store
        self.engine = engine

    async def get_status(self, email: str, workflow_id: str) -> str:
        stored = self.store.get_workflow_status(email, workflow_id)

        try:
            remote = await self.engine.status(workflow_id)
        except (UpstreamError, NotFoundError) as exc:
            logger.warning("Status of %s unavailable from Cromwell: %s", workflow_id, exc)
            return stored

        if remote != stored:
            if stored in TERMINAL_STATUSES and remote not in TERMINAL_STATUSES:
                logger.warning("Cromwell reports %s for workflow %s previously %s", remote, workflow_id, stored)
            self.store.set_workflow_status(email, workflow_id, remote)
            logger.info("Workflow %s status %s -> %s", workflow_id, stored, remote)
        return remote
