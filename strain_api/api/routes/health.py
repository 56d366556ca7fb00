"""
Health API Routes
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from strain_api.core.exceptions import AppError
from strain_api.database import database_health

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """Database health gates the response; Cromwell reachability is reported alongside."""
    db = database_health()
    engine = {"url": None, "version": None}
    cromwell = getattr(request.app.state, "cromwell", None)
    if cromwell is not None:
        engine["url"] = cromwell.base_url
        try:
            engine["version"] = await cromwell.version()
        except AppError as exc:
            engine["error"] = exc.message
    return JSONResponse(
        status_code=status.HTTP_200_OK if db["ok"] else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "healthy" if db["ok"] else "degraded", "database": db, "cromwell": engine},
    )
