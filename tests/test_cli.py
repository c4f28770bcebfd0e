"""
Tests for the command line entry point.
"""

import pytest

from trafficlight_agent import cli
from trafficlight_agent.errors import RegistrationError
from trafficlight_agent.supervisor import RunMode


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def calls(monkeypatch):
    seen = []

    async def fake_run_agent(config, mode):
        seen.append((config, mode))

    monkeypatch.setattr(cli, "run_agent", fake_run_agent)
    return seen


class TestRunModeArgument:
    def test_unknown_mode_exits_1(self, capsys, calls):
        assert cli.main(["sometimes"]) == 1

        err = capsys.readouterr().err
        assert "Unknown run mode 'sometimes'" in err
        assert "Usage:" in err
        assert calls == []

    def test_too_many_arguments(self, capsys, calls):
        assert cli.main(["once", "forever"]) == 1
        assert calls == []

    def test_default_mode_is_forever(self, calls):
        assert cli.main([]) == 0
        assert calls[0][1] is RunMode.FOREVER

    def test_once(self, calls):
        assert cli.main(["once"]) == 0
        assert calls[0][1] is RunMode.ONCE


class TestExitCodes:
    def test_config_error_exits_1(self, monkeypatch, capsys, calls):
        monkeypatch.setenv("BROWSER_BACKEND", "cypress")

        assert cli.main(["once"]) == 1
        assert "browser backend" in capsys.readouterr().err
        assert calls == []

    def test_fatal_session_error_exits_1(self, monkeypatch):
        async def failing_run_agent(config, mode):
            raise RegistrationError("Unable to register client, got 500 from server", status_code=500)

        monkeypatch.setattr(cli, "run_agent", failing_run_agent)

        assert cli.main(["once"]) == 1

    def test_unexpected_error_exits_1(self, monkeypatch):
        async def crashing_run_agent(config, mode):
            raise RuntimeError("event loop exploded")

        monkeypatch.setattr(cli, "run_agent", crashing_run_agent)

        assert cli.main(["once"]) == 1
