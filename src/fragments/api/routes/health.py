from fastapi import APIRouter, Depends, Response, status

from fragments.api.dependencies import get_store
from fragments.api.schemas import HealthResponse, ReadinessResponse
from fragments.core.ports.storage import FragmentStore

router = APIRouter()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe — is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    store: FragmentStore = Depends(get_store),
) -> ReadinessResponse:
    """Readiness probe — checks storage connectivity."""
    if await store.ping():
        return ReadinessResponse(status="ok", storage="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", storage="down")
