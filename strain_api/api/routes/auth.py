from __future__ import annotations

from fastapi import APIRouter, Depends

from strain_api.api.dependencies import get_binder, get_current_principal, get_storage
from strain_api.config import settings
from strain_api.core.security import CredentialBinder
from strain_api.integrations.storage import GoogleStorage
from strain_api.schemas.auth import GoogleAuthRequest, GoogleAuthResponse, Principal

router = APIRouter()


@router.post("/google", response_model=GoogleAuthResponse)
async def google_sign_in(
    payload: GoogleAuthRequest,
    binder: CredentialBinder = Depends(get_binder),
    storage: GoogleStorage = Depends(get_storage),
) -> GoogleAuthResponse:
    token = await binder.sign_in(
        payload.auth_code,
        storage,
        project_id=settings.project_id,
        bucket_name=settings.bucket_name,
    )
    return GoogleAuthResponse(id_token=token)


@router.get("/me", response_model=Principal)
async def me(principal: Principal = Depends(get_current_principal)) -> Principal:
    return principal
