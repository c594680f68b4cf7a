"""Health check endpoints for liveness and readiness checks."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_search_engine
from app.application.interfaces.services import ISearchEngine
from app.core.config import get_settings
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Search engine unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check(
    engine: Annotated[ISearchEngine, Depends(get_search_engine)],
) -> ReadinessResponse | JSONResponse:
    """Return 200 if the search engine answers a ping; 503 otherwise."""
    if await engine.ping():
        return ReadinessResponse()
    return JSONResponse(
        status_code=503,
        content=ReadinessErrorResponse(
            status="not_ready",
            message="Search engine unreachable",
        ).model_dump(),
    )
