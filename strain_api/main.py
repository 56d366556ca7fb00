"""
Strain Analysis API - FastAPI Application
Submits metagenomic strain analyses to Cromwell and serves their results
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from datetime import datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from strain_api.database import init_db
from strain_api.config import settings
from strain_api.api.errors import register_exception_handlers
from strain_api.api.routes import (
    health,
    auth,
    algorithms,
    compute,
    workflows,
    results,
)
from strain_api.integrations.cromwell import CromwellClient
from strain_api.integrations.storage import GoogleStorage
from strain_api.services.decoders import build_registry
from strain_api.services.resources import AlgorithmResources

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting %s...", settings.app_name)

    try:
        init_db()
        logger.info("Database initialized")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {str(e)}")

    resources = AlgorithmResources(settings.resources_dir)
    app.state.resources = resources
    app.state.decoders = build_registry(resources)
    app.state.storage = GoogleStorage()
    app.state.cromwell = CromwellClient(str(settings.cromwell_url), timeout=settings.cromwell_timeout)
    logger.info(f"Decoders registered for: {', '.join(app.state.decoders.algorithms())}")
    logger.info(f"Cromwell at {settings.cromwell_url}, running on {settings.app_env} environment")
    yield
    await app.state.cromwell.aclose()
    logger.info("Shutting down %s...", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Workflow submission and result retrieval for strain abundance analyses",
    version="1.0.0",
    debug=settings.app_debug,
    lifespan=lifespan,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/")
async def root() -> dict:
    return {
        "name": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


prefix = settings.api_v1_prefix
app.include_router(health.router, prefix=prefix, tags=["Health"])
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(algorithms.router, prefix=f"{prefix}/algorithms", tags=["Algorithms"])
app.include_router(compute.router, prefix=f"{prefix}/compute", tags=["Compute"])
app.include_router(workflows.router, prefix=f"{prefix}/workflows", tags=["Workflows"])
app.include_router(results.router, prefix=f"{prefix}/results", tags=["Results"])
