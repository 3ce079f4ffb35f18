"""Unit tests for the shared dispatch deadline."""
import asyncio
import pytest
from cepfinder.core.exceptions import DeadlineExceededError
from cepfinder.lookup.deadline import Deadline


class TestDeadline:
    """Tests for Deadline."""

    @pytest.mark.asyncio
    async def test_remaining_counts_down(self):
        """Test remaining budget shrinks and never goes negative."""
        deadline = Deadline(0.05)

        assert 0 < deadline.remaining() <= 0.05
        assert not deadline.expired

        await asyncio.sleep(0.08)

        assert deadline.remaining() == 0.0
        assert deadline.expired

    @pytest.mark.asyncio
    async def test_run_returns_result_within_budget(self):
        """Test run passes through a result that arrives in time."""
        deadline = Deadline(1.0)

        async def answer():
            return 42

        assert await deadline.run(answer()) == 42

    @pytest.mark.asyncio
    async def test_run_cancels_slow_awaitable(self):
        """Test run raises once the budget elapses and cancels the call."""
        deadline = Deadline(0.05)
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        loop = asyncio.get_running_loop()
        start = loop.time()
        with pytest.raises(DeadlineExceededError, match="context deadline exceeded"):
            await deadline.run(slow())

        assert loop.time() - start < 1.0
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_run_after_expiry_fails_without_starting(self):
        """Test a call not yet started fails immediately once expired."""
        deadline = Deadline(0.01)
        await asyncio.sleep(0.03)
        started = False

        async def never():
            nonlocal started
            started = True

        with pytest.raises(DeadlineExceededError):
            await deadline.run(never())

        assert started is False

    @pytest.mark.asyncio
    async def test_budget_is_shared(self):
        """Test two branches sharing a deadline are bounded by the same instant."""
        deadline = Deadline(0.1)
        await asyncio.sleep(0.06)

        with pytest.raises(DeadlineExceededError):
            await deadline.run(asyncio.sleep(0.08))
