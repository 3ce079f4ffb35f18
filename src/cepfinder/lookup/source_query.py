"""Single upstream query that reports its envelope onto the outcome queue."""
import asyncio
import json
import logging
from typing import Any, Dict
from cepfinder.core.enums import OutcomeKind
from cepfinder.core.exceptions import DecodeError, DeadlineExceededError, TransportError
from cepfinder.lookup.deadline import Deadline
from cepfinder.lookup.models import ResultEnvelope, SourceSpec, UpstreamRequest, UpstreamResponse
from cepfinder.lookup.upstream import UpstreamClient
from cepfinder.observability.metrics import record_source_query

logger = logging.getLogger(__name__)


def decode_payload(response: UpstreamResponse) -> Dict[str, Any]:
    """
    Decode an upstream body into a mapping.

    Args:
        response: Raw upstream response

    Returns:
        Dict[str, Any]: Payload keys and values, verbatim

    Raises:
        DecodeError: If the body is not a JSON object
    """
    try:
        payload = json.loads(response.body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"invalid JSON payload: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(payload).__name__}"
        )
    return payload


class SourceQuery:
    """
    Executes one upstream call for one source.

    Produces exactly one ResultEnvelope per completed call and delivers it
    onto the dispatch's outcome queue. Calls cut off by the deadline, and
    sends that would block past it, deliver nothing.
    """

    def __init__(self, spec: SourceSpec, client: UpstreamClient):
        """
        Initialize source query.

        Args:
            spec: Source to query
            client: Upstream client performing the call
        """
        self.spec = spec
        self.client = client

    async def run(self, cep: str, deadline: Deadline, outcomes: asyncio.Queue) -> bool:
        """
        Fetch, decode and deliver one envelope.

        Args:
            cep: Code to look up
            deadline: Shared dispatch deadline
            outcomes: Outcome queue read by the dispatcher

        Returns:
            bool: True if the envelope was delivered, False if abandoned
        """
        try:
            envelope = await self.fetch(cep, deadline)
        except DeadlineExceededError:
            # Cancellation observed: nothing is delivered
            record_source_query(self.spec.name, OutcomeKind.TIMEOUT)
            logger.debug(f"Source {self.spec.name} did not answer {cep} before the deadline")
            return False

        record_source_query(self.spec.name, envelope.kind)
        return await self.deliver(envelope, deadline, outcomes)

    async def fetch(self, cep: str, deadline: Deadline) -> ResultEnvelope:
        """
        Call the upstream and turn the result into an envelope.

        Args:
            cep: Code to look up
            deadline: Shared dispatch deadline bounding the call

        Returns:
            ResultEnvelope: Success or failure envelope for this source

        Raises:
            DeadlineExceededError: If the deadline elapses before the call finishes
        """
        request = UpstreamRequest(
            method="GET",
            url=self.spec.build_url(cep),
            deadline=deadline,
        )

        try:
            response = await deadline.run(self.client.do(request))
            if not response.is_success:
                raise TransportError(
                    f"upstream responded with HTTP {response.status_code}"
                )
            data = decode_payload(response)
        except DeadlineExceededError:
            raise
        except (TransportError, DecodeError) as e:
            logger.warning(f"Source {self.spec.name} failed: {e}")
            return ResultEnvelope.failure(self.spec.name, str(e))
        except Exception as e:
            logger.error(f"Unexpected error querying {self.spec.name}: {e}", exc_info=True)
            return ResultEnvelope.failure(self.spec.name, str(e) or type(e).__name__)

        return ResultEnvelope.success(self.spec.name, data)

    async def deliver(
        self, envelope: ResultEnvelope, deadline: Deadline, outcomes: asyncio.Queue
    ) -> bool:
        """
        Put the envelope on the queue without blocking past the deadline.

        Args:
            envelope: Envelope to deliver
            deadline: Shared dispatch deadline
            outcomes: Outcome queue

        Returns:
            bool: True if delivered, False if abandoned after the deadline
        """
        try:
            outcomes.put_nowait(envelope)
            return True
        except asyncio.QueueFull:
            pass

        try:
            await deadline.run(outcomes.put(envelope))
            return True
        except DeadlineExceededError:
            logger.debug(f"Dropped late envelope from {self.spec.name}")
            return False
