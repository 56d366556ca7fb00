from __future__ import annotations

from fastapi import APIRouter, Depends

from strain_api.api.dependencies import get_current_principal, get_result_retriever
from strain_api.integrations.storage import ResultLocation
from strain_api.schemas.auth import Principal
from strain_api.services.results import ResultRetriever

router = APIRouter()


@router.get(
    "/bucket/{bucket}/algorithm/{algorithm}/workflow/{workflow_id}/folder/{folder}/species/{species}",
    response_model=dict[str, float],
)
async def workflow_result(
    bucket: str,
    algorithm: str,
    workflow_id: str,
    folder: str,
    species: str,
    principal: Principal = Depends(get_current_principal),
    retriever: ResultRetriever = Depends(get_result_retriever),
) -> dict[str, float]:
    """Abundances parsed from the abund.txt a workflow call wrote to storage."""
    location = ResultLocation.for_output(bucket, algorithm, workflow_id, folder)
    return await retriever.get_result(principal.email, location, algorithm, species)
