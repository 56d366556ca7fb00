from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from strain_api.core.exceptions import AuthError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


def build_storage_service(credentials: Credentials) -> Any:
    return build("storage", "v1", credentials=credentials, cache_discovery=False)


@dataclass(frozen=True)
class ResultLocation:
    bucket: str
    object_path: str

    @classmethod
    def for_output(cls, bucket: str, algorithm: str, workflow_id: str, folder: str) -> "ResultLocation":
        """Location of the abundance file a workflow call writes to its output directory."""
        return cls(bucket=bucket, object_path=f"{algorithm}/{workflow_id}/{folder}/outputdir/abund.txt")


def _http_status(exc: HttpError) -> int | None:
    return getattr(exc.resp, "status", None)


class GoogleStorage:
    """Google Cloud Storage access on behalf of a signed-in user."""

    def __init__(self, service_factory: Callable[[Credentials], Any] = build_storage_service):
        self._service_factory = service_factory

    async def fetch(self, location: ResultLocation, credentials: Credentials) -> str:
        def _get_media() -> bytes:
            service = self._service_factory(credentials)
            return service.objects().get_media(bucket=location.bucket, object=location.object_path).execute()

        try:
            data = await asyncio.to_thread(_get_media)
        except RefreshError as exc:
            raise AuthError(str(exc) or "invalid_grant") from exc
        except HttpError as exc:
            status = _http_status(exc)
            if status == 404:
                raise NotFoundError(f"No such object: {location.bucket}/{location.object_path}") from exc
            if status == 401:
                raise AuthError(exc.reason or "Invalid credentials") from exc
            logger.error("Storage fetch of %s/%s failed: %s", location.bucket, location.object_path, exc)
            raise UpstreamError(exc.reason or "Storage request failed", status_code=status) from exc

        if isinstance(data, bytes):
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise UpstreamError("Result object is not UTF-8 text") from exc
        return str(data)

    async def ensure_bucket(self, project_id: str, bucket_name: str, credentials: Credentials) -> None:
        """Create the bucket Cromwell writes to; an existing bucket is not an error."""

        def _insert() -> Any:
            service = self._service_factory(credentials)
            return service.buckets().insert(project=project_id, body={"name": bucket_name}).execute()

        try:
            await asyncio.to_thread(_insert)
            logger.info("Created bucket %s for project %s", bucket_name, project_id)
        except RefreshError as exc:
            raise AuthError(str(exc) or "invalid_grant") from exc
        except HttpError as exc:
            status = _http_status(exc)
            if status == 409:
                logger.debug("Bucket %s already exists", bucket_name)
                return
            if status == 401:
                raise AuthError(exc.reason or "Invalid credentials") from exc
            logger.error("Bucket creation for %s failed: %s", bucket_name, exc)
            raise UpstreamError(exc.reason or "Bucket creation failed", status_code=status) from exc
