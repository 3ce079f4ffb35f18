"""Shared deadline for one dispatch."""
import asyncio
from typing import Awaitable, Optional, TypeVar
from cepfinder.core.exceptions import DeadlineExceededError

T = TypeVar("T")


class Deadline:
    """
    Deadline-bound execution context shared by every branch of a dispatch.

    Set once from a time budget and never extended. Any awaitable run
    through :meth:`run` is cancelled when the budget elapses.
    """

    def __init__(self, budget: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize deadline.

        Args:
            budget: Time budget in seconds, counted from now
            loop: Event loop whose clock is used (defaults to the running loop)
        """
        self.budget = budget
        self._loop = loop or asyncio.get_running_loop()
        self._expires_at = self._loop.time() + budget

    def remaining(self) -> float:
        """
        Seconds left before the deadline.

        Returns:
            float: Remaining budget, never negative
        """
        return max(0.0, self._expires_at - self._loop.time())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` within the remaining budget.

        Args:
            awaitable: Coroutine or future to bound

        Returns:
            The awaitable's result

        Raises:
            DeadlineExceededError: If the budget elapses first
        """
        remaining = self.remaining()
        if remaining <= 0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise DeadlineExceededError("context deadline exceeded")

        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as e:
            raise DeadlineExceededError("context deadline exceeded") from e
