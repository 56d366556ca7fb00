"""
Cromwell REST client.
See https://cromwell.readthedocs.io/en/stable/api/RESTAPI/
"""
from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from strain_api.core.exceptions import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

WORKFLOWS_PATH = "api/workflows/v1"


class CromwellClient:
    """Async client for one Cromwell server, created once at startup and shared."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _workflow_path(self, workflow_id: str, action: str) -> str:
        return f"{WORKFLOWS_PATH}/{quote(workflow_id, safe='')}/{action}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Cromwell %s %s unreachable: %s", method, path, exc)
            raise UpstreamError(f"Cromwell unreachable: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(response.text or "Workflow not found")
        if not response.is_success:
            logger.error("Cromwell %s %s failed (%s): %s", method, path, response.status_code, response.text)
            raise UpstreamError(
                response.text or f"Cromwell returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json() if response.content else {}
        except ValueError as exc:
            raise UpstreamError("Cromwell returned a non-JSON body", status_code=response.status_code) from exc

    async def submit(
        self,
        workflow_source: bytes,
        inputs: dict[str, Any],
        options: dict[str, Any],
        workflow_type: str = "WDL",
        workflow_type_version: str = "draft-2",
    ) -> str:
        """Submit a workflow for execution and return the id Cromwell assigned to it."""
        files = {
            "workflowSource": ("workflow.wdl", workflow_source, "application/octet-stream"),
            "workflowInputs": ("inputs.json", json.dumps(inputs).encode("utf-8"), "application/json"),
            "workflowOptions": ("options.json", json.dumps(options).encode("utf-8"), "application/json"),
        }
        data = {"workflowType": workflow_type, "workflowTypeVersion": workflow_type_version}
        body = await self._request("POST", WORKFLOWS_PATH, files=files, data=data)
        workflow_id = body.get("id")
        if not workflow_id:
            raise UpstreamError("Cromwell response missing workflow id")
        return str(workflow_id)

    async def status(self, workflow_id: str) -> str:
        body = await self._request("GET", self._workflow_path(workflow_id, "status"))
        status = body.get("status")
        if not status:
            raise UpstreamError("Cromwell response missing status")
        return str(status)

    async def outputs(self, workflow_id: str) -> dict[str, Any]:
        return await self._request("GET", self._workflow_path(workflow_id, "outputs"))

    async def abort(self, workflow_id: str) -> dict[str, Any]:
        return await self._request("POST", self._workflow_path(workflow_id, "abort"))

    async def version(self) -> str:
        """Cromwell's version string; used as a liveness probe."""
        body = await self._request("GET", "engine/v1/version")
        return str(body.get("cromwell", ""))
