"""
Unit tests for AgentConfig.
"""

import pytest

from trafficlight_agent.config import AgentConfig
from trafficlight_agent.errors import ConfigError


class TestFromEnv:
    def test_defaults(self):
        config = AgentConfig.from_env({})

        assert config.trafficlight_url == "http://127.0.0.1:5000"
        assert config.element_url == "http://127.0.0.1:8080"
        assert config.browser_backend == "playwright"
        assert config.browser_executable is None
        assert config.headless is False
        assert config.action_timeout_ms == 15000
        assert config.idle_seconds == 5.0
        assert config.client_type == "element-web"
        assert config.client_version == "UNKNOWN"
        assert config.artifact_dir is None

    def test_overrides(self):
        config = AgentConfig.from_env({
            "TRAFFICLIGHT_URL": "http://tl:5000/",
            "ELEMENT_WEB_URL": "http://element:8080",
            "BROWSER_BACKEND": "Selenium",
            "BROWSER_EXECUTABLE": "/usr/bin/chromium-browser",
            "HEADLESS": "yes",
            "ACTION_TIMEOUT_MS": "20000",
            "IDLE_SECONDS": "0.5",
            "CLIENT_VERSION": "1.11.0",
            "ARTIFACT_DIR": "artifacts",
            "LOG_LEVEL": "debug",
            "LOG_FORMAT": "JSON",
        })

        assert config.trafficlight_url == "http://tl:5000"
        assert config.browser_backend == "selenium"
        assert config.browser_executable == "/usr/bin/chromium-browser"
        assert config.headless is True
        assert config.action_timeout_ms == 20000
        assert config.idle_seconds == 0.5
        assert config.client_version == "1.11.0"
        assert config.artifact_dir == "artifacts"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("TRAFFICLIGHT_URL", "http://from-env:5000")

        assert AgentConfig.from_env().trafficlight_url == "http://from-env:5000"


class TestValidation:
    @pytest.mark.parametrize("environ,message", [
        ({"BROWSER_BACKEND": "cypress"}, "browser backend"),
        ({"HEADLESS": "maybe"}, "HEADLESS"),
        ({"ACTION_TIMEOUT_MS": "soon"}, "ACTION_TIMEOUT_MS"),
        ({"ACTION_TIMEOUT_MS": "0"}, "ACTION_TIMEOUT_MS"),
        ({"HTTP_TIMEOUT": "-1"}, "HTTP_TIMEOUT"),
        ({"RESTART_BACKOFF_INITIAL": "90"}, "RESTART_BACKOFF"),
        ({"LOG_LEVEL": "verbose"}, "LOG_LEVEL"),
        ({"LOG_FORMAT": "jsonl"}, "LOG_FORMAT"),
    ])
    def test_invalid_values(self, environ, message):
        with pytest.raises(ConfigError, match=message):
            AgentConfig.from_env(environ)
