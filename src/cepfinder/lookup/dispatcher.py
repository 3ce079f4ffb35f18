"""Race dispatcher: fan out to every source, first envelope wins."""
import asyncio
import logging
import time
from typing import List, Sequence, Set
from cepfinder.core.exceptions import DeadlineExceededError
from cepfinder.lookup.deadline import Deadline
from cepfinder.lookup.models import DispatchOutcome, SourceSpec
from cepfinder.lookup.source_query import SourceQuery
from cepfinder.lookup.upstream import UpstreamClient
from cepfinder.observability.metrics import record_dispatch, source_queries_in_flight

logger = logging.getLogger(__name__)

# Strong references to source queries that outlive their dispatch
_in_flight: Set[asyncio.Task] = set()


def in_flight_count() -> int:
    """
    Number of source query tasks still running, across all dispatches.

    Returns:
        int: Running task count
    """
    return len(_in_flight)


def _discard_task(task: asyncio.Task) -> None:
    _in_flight.discard(task)
    source_queries_in_flight.set(len(_in_flight))


class RaceDispatcher:
    """
    Queries every configured source concurrently under one shared deadline.

    Resolves to the first envelope delivered, success or failure, or to a
    deadline-exceeded outcome. Losing queries are not cancelled; they run
    until they finish or the deadline elapses, and their envelopes are
    discarded.
    """

    def __init__(
        self,
        sources: Sequence[SourceSpec],
        client: UpstreamClient,
        timeout: float = 1.0,
    ):
        """
        Initialize dispatcher.

        Args:
            sources: Ordered source specs (at least one)
            client: Upstream client shared by all source queries
            timeout: Shared time budget in seconds

        Raises:
            ValueError: If no sources are given or the timeout is not positive
        """
        if not sources:
            raise ValueError("At least one source is required")
        if timeout <= 0:
            raise ValueError("Dispatch timeout must be positive")

        self.sources: List[SourceSpec] = list(sources)
        self.client = client
        self.timeout = timeout

    async def dispatch(self, cep: str) -> DispatchOutcome:
        """
        Race all sources for ``cep``.

        Args:
            cep: Code to look up

        Returns:
            DispatchOutcome: Winning envelope, or deadline exceeded
        """
        started = time.monotonic()
        outcomes: asyncio.Queue = asyncio.Queue(maxsize=len(self.sources))
        deadline = Deadline(self.timeout)

        for spec in self.sources:
            query = SourceQuery(spec, self.client)
            task = asyncio.create_task(
                query.run(cep, deadline, outcomes),
                name=f"source-query-{spec.name}",
            )
            _in_flight.add(task)
            task.add_done_callback(_discard_task)
        source_queries_in_flight.set(len(_in_flight))

        try:
            envelope = await deadline.run(outcomes.get())
        except DeadlineExceededError:
            elapsed = time.monotonic() - started
            logger.warning(
                f"No source answered {cep} within {self.timeout}s "
                f"({len(self.sources)} queried)"
            )
            outcome = DispatchOutcome(deadline_exceeded=True, elapsed=elapsed)
            record_dispatch(outcome.kind, elapsed)
            return outcome

        elapsed = time.monotonic() - started
        outcome = DispatchOutcome(envelope=envelope, elapsed=elapsed)
        logger.info(
            f"Source {envelope.source} won {cep} in {elapsed:.3f}s ({outcome.kind})"
        )
        record_dispatch(outcome.kind, elapsed, source=envelope.source)
        return outcome
