"""Prometheus metrics endpoint."""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from cepfinder.lookup.dispatcher import in_flight_count
from cepfinder.observability.metrics import source_queries_in_flight


router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    # Refresh gauge before returning
    source_queries_in_flight.set(in_flight_count())

    return PlainTextResponse(
        content=generate_latest().decode('utf-8'),
        media_type=CONTENT_TYPE_LATEST
    )
