"""Health check API endpoint."""
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from cepfinder.api.deps import get_source_registry
from cepfinder.api.schemas.response import StandardResponse, ResponseCodes
from cepfinder.config import get_settings
from cepfinder.lookup.dispatcher import in_flight_count
from cepfinder.lookup.source_registry import SourceRegistry

router = APIRouter()


class HealthData(BaseModel):
    """Health check data model."""

    status: str
    sources: List[str]
    dispatch_timeout_seconds: float
    in_flight_queries: int


@router.get("/health", response_model=StandardResponse[HealthData])
async def health_check(
    registry: SourceRegistry = Depends(get_source_registry),
) -> StandardResponse[HealthData]:
    """
    Health check endpoint.

    Upstream sources are not probed; only local configuration and the
    number of source queries still running are reported.

    Returns:
        StandardResponse: Service health status
    """
    settings = get_settings()

    health_data = HealthData(
        status="healthy",
        sources=registry.list_sources(),
        dispatch_timeout_seconds=settings.DISPATCH_TIMEOUT_SECONDS,
        in_flight_queries=in_flight_count(),
    )

    return StandardResponse(
        data=health_data,
        code=ResponseCodes.HEALTH_OK,
        httpStatus="OK",
        description="Health check completed successfully",
    )
