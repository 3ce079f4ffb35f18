"""Upstream client abstraction and its httpx implementation."""
import logging
from abc import ABC, abstractmethod
from typing import Optional
import httpx
from cepfinder.core.exceptions import TransportError
from cepfinder.lookup.models import UpstreamRequest, UpstreamResponse

logger = logging.getLogger(__name__)


class UpstreamClient(ABC):
    """
    Capability to perform one network call to one upstream source.

    Implementations return the raw status and body, or raise
    TransportError. Callers bound the call with the request's deadline.
    """

    @abstractmethod
    async def do(self, request: UpstreamRequest) -> UpstreamResponse:
        """
        Perform the request.

        Args:
            request: Method, URL and deadline of the call

        Returns:
            UpstreamResponse: Raw status and body

        Raises:
            TransportError: If the call could not be completed
        """


class HttpxUpstreamClient(UpstreamClient):
    """UpstreamClient backed by ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize client.

        Args:
            client: Optional shared AsyncClient (a new one is created per call otherwise)
        """
        self._client = client

    async def do(self, request: UpstreamRequest) -> UpstreamResponse:
        timeout = httpx.Timeout(request.deadline.remaining())
        try:
            if self._client is not None:
                response = await self._client.request(
                    request.method, request.url, timeout=timeout
                )
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.request(request.method, request.url)
        except httpx.HTTPError as e:
            logger.debug(f"{request.method} {request.url} failed: {e!r}")
            raise TransportError(str(e) or type(e).__name__) from e

        return UpstreamResponse(status_code=response.status_code, body=response.content)
