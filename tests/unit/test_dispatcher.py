"""Unit tests for RaceDispatcher."""
import asyncio
import pytest
from cepfinder.core.enums import OutcomeKind
from cepfinder.core.exceptions import TransportError
from cepfinder.lookup import dispatcher as dispatcher_module
from cepfinder.lookup.dispatcher import RaceDispatcher
from cepfinder.lookup.models import SourceSpec

CEP = "01310-100"
ALPHA_URL = "https://alpha.test/cep/01310-100"
BETA_URL = "https://beta.test/ws/01310-100/json/"
PAYLOAD = {"code": "01310-100", "city": "São Paulo"}


async def drain_in_flight():
    """Wait for straggler source queries so none outlive the test loop."""
    loop = asyncio.get_running_loop()
    tasks = [t for t in dispatcher_module._in_flight if t.get_loop() is loop]
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


class TestRaceDispatcherConstruction:
    """Tests for dispatcher configuration."""

    def test_requires_at_least_one_source(self, fake_client):
        with pytest.raises(ValueError, match="At least one source is required"):
            RaceDispatcher([], fake_client)

    def test_requires_positive_timeout(self, fake_client, alpha_beta_sources):
        with pytest.raises(ValueError, match="must be positive"):
            RaceDispatcher(alpha_beta_sources, fake_client, timeout=0)


class TestRaceDispatcher:
    """Tests for RaceDispatcher.dispatch."""

    @pytest.mark.asyncio
    async def test_single_source_success(self, fake_client, alpha_beta_sources):
        """Alpha answers instantly and Beta is not configured: Alpha wins."""
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        dispatcher = RaceDispatcher(alpha_beta_sources[:1], fake_client, timeout=1.0)

        outcome = await dispatcher.dispatch(CEP)

        assert not outcome.deadline_exceeded
        assert outcome.envelope.source == "Alpha"
        assert outcome.envelope.data == PAYLOAD
        assert outcome.kind == OutcomeKind.SUCCESS
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_fastest_source_wins(self, fake_client, alpha_beta_sources):
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_delay(ALPHA_URL, 0.3)
        fake_client.set_response(BETA_URL, {"cep": CEP})

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)

        assert outcome.envelope.source == "Beta"
        assert outcome.elapsed < 0.3
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_tie_resolves_to_one_of_the_sources(self, fake_client, alpha_beta_sources):
        """Zero-delay canned responses: either source may win."""
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_response(BETA_URL, PAYLOAD)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)

        assert outcome.envelope.source in {"Alpha", "Beta"}
        assert outcome.envelope.data == PAYLOAD
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_repeated_queries_are_content_equivalent(self, fake_client, alpha_beta_sources):
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_response(BETA_URL, {"cep": CEP})
        fake_client.set_delay(BETA_URL, 0.2)
        dispatcher = RaceDispatcher(alpha_beta_sources, fake_client)

        outcomes = [await dispatcher.dispatch(CEP) for _ in range(3)]

        assert {(o.envelope.source, tuple(sorted(o.envelope.data.items()))) for o in outcomes} == {
            ("Alpha", tuple(sorted(PAYLOAD.items())))
        }
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_all_sources_too_slow_times_out(self, fake_client, alpha_beta_sources):
        """Both sources take 2s against a 1s budget."""
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_response(BETA_URL, PAYLOAD)
        fake_client.set_delay(ALPHA_URL, 2.0)
        fake_client.set_delay(BETA_URL, 2.0)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client, timeout=1.0).dispatch(CEP)

        assert outcome.deadline_exceeded
        assert outcome.envelope is None
        assert outcome.kind == OutcomeKind.TIMEOUT
        assert 0.9 <= outcome.elapsed < 1.5
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_stragglers_finish_at_deadline(self, fake_client, alpha_beta_sources):
        """Timed-out branches stop at the shared deadline, never completing their calls."""
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_response(BETA_URL, PAYLOAD)
        fake_client.set_delay(ALPHA_URL, 2.0)
        fake_client.set_delay(BETA_URL, 2.0)

        await RaceDispatcher(alpha_beta_sources, fake_client, timeout=0.1).dispatch(CEP)
        await asyncio.wait_for(drain_in_flight(), timeout=0.5)

        loop = asyncio.get_running_loop()
        assert not [t for t in dispatcher_module._in_flight if t.get_loop() is loop]
        assert fake_client.completed == []

    @pytest.mark.asyncio
    async def test_fast_failure_wins(self, fake_client, alpha_beta_sources):
        """Alpha fails instantly, Beta succeeds later: Alpha's failure wins."""
        fake_client.set_error(ALPHA_URL, TransportError("connection refused"))
        fake_client.set_response(BETA_URL, PAYLOAD)
        fake_client.set_delay(BETA_URL, 0.1)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)

        assert outcome.envelope.source == "Alpha"
        assert outcome.envelope.error == "connection refused"
        assert outcome.kind == OutcomeKind.FAILURE
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_success_wins_over_slower_failure(self, fake_client, alpha_beta_sources):
        """Alpha's transport error arrives after Beta's success: Beta wins."""
        fake_client.set_error(ALPHA_URL, TransportError("connection refused"))
        fake_client.set_delay(ALPHA_URL, 0.2)
        fake_client.set_response(BETA_URL, PAYLOAD)
        fake_client.set_delay(BETA_URL, 0.05)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)

        assert outcome.envelope.source == "Beta"
        assert outcome.envelope.data == PAYLOAD
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_fast_decode_failure_wins(self, fake_client, alpha_beta_sources):
        """A non-object body from the fastest source is the overall result."""
        fake_client.set_response(ALPHA_URL, "<html>oops</html>")
        fake_client.set_response(BETA_URL, PAYLOAD)
        fake_client.set_delay(BETA_URL, 0.1)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)

        assert outcome.envelope.source == "Alpha"
        assert "invalid JSON payload" in outcome.envelope.error
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_failure_within_budget_beats_timeout(self, fake_client, alpha_beta_sources):
        """A failure that arrives in time resolves the race instead of the deadline."""
        fake_client.set_error(ALPHA_URL, TransportError("connection reset"))
        fake_client.set_delay(ALPHA_URL, 0.05)
        fake_client.set_delay(BETA_URL, 2.0)

        outcome = await RaceDispatcher(alpha_beta_sources, fake_client, timeout=0.5).dispatch(CEP)

        assert not outcome.deadline_exceeded
        assert outcome.envelope.error == "connection reset"
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_many_sources_resolve_to_single_responder(self, fake_client):
        """With N sources only the one answering in time can win."""
        sources = [
            SourceSpec(name=f"S{i}", endpoint=f"https://s{i}.test/{{cep}}") for i in range(5)
        ]
        for i in range(5):
            url = f"https://s{i}.test/{CEP}"
            fake_client.set_response(url, {"index": i})
            fake_client.set_delay(url, 2.0)
        fake_client.set_delay(f"https://s3.test/{CEP}", 0.05)

        outcome = await RaceDispatcher(sources, fake_client, timeout=0.3).dispatch(CEP)

        assert outcome.envelope.source == "S3"
        assert outcome.envelope.data == {"index": 3}
        await drain_in_flight()

    @pytest.mark.asyncio
    async def test_each_dispatch_launches_every_source(self, fake_client, alpha_beta_sources):
        fake_client.set_response(ALPHA_URL, PAYLOAD)
        fake_client.set_response(BETA_URL, PAYLOAD)

        await RaceDispatcher(alpha_beta_sources, fake_client).dispatch(CEP)
        await drain_in_flight()

        assert sorted(r.url for r in fake_client.requests) == sorted([ALPHA_URL, BETA_URL])
        deadlines = {id(r.deadline) for r in fake_client.requests}
        assert len(deadlines) == 1
