"""API dependencies for FastAPI."""
from typing import Annotated, Optional
from fastapi import Depends
from cepfinder.config import get_settings
from cepfinder.core.exceptions import MissingParameterError
from cepfinder.lookup.dispatcher import RaceDispatcher
from cepfinder.lookup.source_registry import SourceRegistry
from cepfinder.lookup.upstream import HttpxUpstreamClient, UpstreamClient

_upstream_client: Optional[UpstreamClient] = None


def get_upstream_client() -> UpstreamClient:
    """
    Dependency to get the upstream client (singleton).

    Returns:
        UpstreamClient: httpx-backed upstream client
    """
    global _upstream_client
    if _upstream_client is None:
        _upstream_client = HttpxUpstreamClient()
    return _upstream_client


def get_source_registry() -> SourceRegistry:
    """
    Dependency to get the configured source registry.

    Returns:
        SourceRegistry: BrasilAPI and ViaCEP sources from settings
    """
    return SourceRegistry.from_settings(get_settings())


def get_dispatcher(
    registry: Annotated[SourceRegistry, Depends(get_source_registry)],
    client: Annotated[UpstreamClient, Depends(get_upstream_client)],
) -> RaceDispatcher:
    """
    Dependency to get a RaceDispatcher for one request.

    Args:
        registry: Source registry (injected)
        client: Upstream client (injected)

    Returns:
        RaceDispatcher: Dispatcher over every registered source
    """
    settings = get_settings()
    return RaceDispatcher(
        registry.specs(),
        client,
        timeout=settings.DISPATCH_TIMEOUT_SECONDS,
    )


def require_cep(cep: Optional[str]) -> str:
    """
    Validate the lookup code query parameter.

    Args:
        cep: Raw query parameter value

    Returns:
        str: The code, stripped of surrounding whitespace

    Raises:
        MissingParameterError: If the code is missing or blank
    """
    if cep is None or not cep.strip():
        raise MissingParameterError("cep is required")
    return cep.strip()
