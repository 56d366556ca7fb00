from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from strain_api.api.dependencies import get_resources
from strain_api.core.exceptions import NotFoundError
from strain_api.services.resources import AlgorithmResources

router = APIRouter()


@router.get("/", response_model=list[str])
async def list_algorithms(resources: AlgorithmResources = Depends(get_resources)) -> list[str]:
    """Algorithms with a workflow definition available for submission."""
    return resources.list_algorithms()


@router.get("/{algorithm}/species")
async def list_species(algorithm: str, resources: AlgorithmResources = Depends(get_resources)) -> list[Any]:
    """Reference species supported by an algorithm."""
    species = resources.species_for(algorithm)
    if species is None:
        raise NotFoundError(f"No species list for algorithm {algorithm}")
    return species
