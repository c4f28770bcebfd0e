"""
Unit tests for the Supervisor restart policy.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from trafficlight_agent.agent_loop import SessionSummary
from trafficlight_agent.errors import PollError, RegistrationError
from trafficlight_agent.supervisor import RestartBackoff, RunMode, Supervisor


class TestRunMode:
    @pytest.mark.parametrize("value,mode", [
        ("once", RunMode.ONCE),
        ("forever", RunMode.FOREVER),
        ("FOREVER", RunMode.FOREVER),
    ])
    def test_parse(self, value, mode):
        assert RunMode.parse(value) is mode

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown run mode 'sometimes'"):
            RunMode.parse("sometimes")


class TestRestartBackoff:
    def test_doubles_up_to_maximum(self):
        backoff = RestartBackoff(initial=1.0, maximum=5.0)

        assert [backoff.next_delay() for _ in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_reset(self):
        backoff = RestartBackoff(initial=2.0, maximum=60.0)
        backoff.next_delay()
        backoff.next_delay()
        backoff.reset()

        assert backoff.next_delay() == 2.0

    def test_many_failures_stay_at_maximum(self):
        backoff = RestartBackoff(initial=1.0, maximum=60.0)

        delays = [backoff.next_delay() for _ in range(1100)]

        assert max(delays) == 60.0
        assert delays[-1] == 60.0
        assert backoff.failures == 6


class TestOnceMode:
    @pytest.mark.asyncio
    async def test_runs_single_session(self):
        summary = SessionSummary(session_id="abc", exit_requested=True)
        run_session = AsyncMock(return_value=summary)

        result = await Supervisor(run_session).run(RunMode.ONCE)

        assert result is summary
        run_session.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fatal_error_propagates(self):
        run_session = AsyncMock(side_effect=RegistrationError("refused", status_code=500))
        supervisor = Supervisor(run_session)

        with pytest.raises(RegistrationError):
            await supervisor.run(RunMode.ONCE)

        assert supervisor.sessions_started == 1


class TestForeverMode:
    @pytest.mark.asyncio
    async def test_restarts_with_backoff_after_fatal_errors(self):
        run_session = AsyncMock(side_effect=[
            RegistrationError("refused", status_code=500),
            PollError("poll failed with 502", status_code=502),
            SessionSummary(session_id="ok", exit_requested=True),
            RuntimeError("browser failed to launch"),
            asyncio.CancelledError(),
        ])
        supervisor = Supervisor(run_session, RestartBackoff(initial=1.0, maximum=10.0))

        with patch("trafficlight_agent.supervisor.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(asyncio.CancelledError):
                await supervisor.run(RunMode.FOREVER)

        assert supervisor.sessions_started == 5
        # the clean session in the middle resets the backoff
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 1.0]

    @pytest.mark.asyncio
    async def test_clean_exit_starts_next_session_immediately(self):
        run_session = AsyncMock(side_effect=[
            SessionSummary(session_id="a", exit_requested=True),
            SessionSummary(session_id="b", exit_requested=True),
            asyncio.CancelledError(),
        ])

        with patch("trafficlight_agent.supervisor.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(asyncio.CancelledError):
                await Supervisor(run_session).run(RunMode.FOREVER)

        assert run_session.await_count == 3
        sleep.assert_not_awaited()
