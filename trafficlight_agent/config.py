"""
Configuration for the trafficlight agent.

Environment Variables:
- TRAFFICLIGHT_URL: Control server base URL (default: http://127.0.0.1:5000)
- ELEMENT_WEB_URL: Web application under test (default: http://127.0.0.1:8080)
- BROWSER_BACKEND: "playwright" or "selenium" (default: playwright)
- BROWSER_EXECUTABLE: Browser binary to launch (default: bundled browser)
- HEADLESS: Run the browser headless (default: false)
- ACTION_TIMEOUT_MS: Timeout for every DOM operation (default: 15000)
- IDLE_SECONDS: How long the "idle" action waits (default: 5)
- HTTP_TIMEOUT: Control server request timeout in seconds (default: 30)
- CLIENT_VERSION: Version reported when registering (default: UNKNOWN)
- RESTART_BACKOFF_INITIAL / RESTART_BACKOFF_MAX: Forever-mode restart delays
- ARTIFACT_DIR: Where to write session traces and error screenshots (default: off)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_FORMAT: "pretty" or "json" (default: pretty)

Values are read from the process environment after loading a local .env file.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from trafficlight_agent.errors import ConfigError


DEFAULT_TRAFFICLIGHT_URL = "http://127.0.0.1:5000"
DEFAULT_ELEMENT_WEB_URL = "http://127.0.0.1:8080"
BROWSER_BACKENDS = ("playwright", "selenium")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("pretty", "json")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass
class AgentConfig:
    """Settings for one agent process."""

    trafficlight_url: str = DEFAULT_TRAFFICLIGHT_URL
    element_url: str = DEFAULT_ELEMENT_WEB_URL
    browser_backend: str = "playwright"
    browser_executable: Optional[str] = None
    headless: bool = False
    action_timeout_ms: int = 15000
    idle_seconds: float = 5.0
    http_timeout: float = 30.0
    client_type: str = "element-web"
    client_version: str = "UNKNOWN"
    restart_backoff_initial: float = 1.0
    restart_backoff_max: float = 60.0
    artifact_dir: Optional[str] = None
    log_level: str = "INFO"
    log_format: str = "pretty"

    def __post_init__(self):
        self.trafficlight_url = self.trafficlight_url.rstrip("/")
        if self.browser_backend not in BROWSER_BACKENDS:
            raise ConfigError(
                f"Unknown browser backend '{self.browser_backend}', "
                f"expected one of: {', '.join(BROWSER_BACKENDS)}"
            )
        if self.action_timeout_ms <= 0:
            raise ConfigError("ACTION_TIMEOUT_MS must be positive")
        if self.http_timeout <= 0:
            raise ConfigError("HTTP_TIMEOUT must be positive")
        if self.idle_seconds < 0:
            raise ConfigError("IDLE_SECONDS must not be negative")
        if self.restart_backoff_initial <= 0 or self.restart_backoff_max < self.restart_backoff_initial:
            raise ConfigError(
                "RESTART_BACKOFF_INITIAL must be positive and not exceed RESTART_BACKOFF_MAX"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown LOG_LEVEL '{self.log_level}', expected one of: {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"Unknown LOG_FORMAT '{self.log_format}', expected one of: {', '.join(LOG_FORMATS)}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (no .env loading then)

        Returns:
            AgentConfig instance
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        return cls(
            trafficlight_url=environ.get("TRAFFICLIGHT_URL", DEFAULT_TRAFFICLIGHT_URL),
            element_url=environ.get("ELEMENT_WEB_URL", DEFAULT_ELEMENT_WEB_URL),
            browser_backend=environ.get("BROWSER_BACKEND", "playwright").lower(),
            browser_executable=environ.get("BROWSER_EXECUTABLE") or None,
            headless=_parse_bool(environ, "HEADLESS", False),
            action_timeout_ms=_parse_number(environ, "ACTION_TIMEOUT_MS", 15000, int),
            idle_seconds=_parse_number(environ, "IDLE_SECONDS", 5.0, float),
            http_timeout=_parse_number(environ, "HTTP_TIMEOUT", 30.0, float),
            client_version=environ.get("CLIENT_VERSION", "UNKNOWN"),
            restart_backoff_initial=_parse_number(environ, "RESTART_BACKOFF_INITIAL", 1.0, float),
            restart_backoff_max=_parse_number(environ, "RESTART_BACKOFF_MAX", 60.0, float),
            artifact_dir=environ.get("ARTIFACT_DIR") or None,
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            log_format=environ.get("LOG_FORMAT", "pretty").lower(),
        )


def _parse_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got '{raw}'")


def _parse_number(environ: Mapping[str, str], name: str, default, kind):
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got '{raw}'") from e


__all__ = ["AgentConfig", "DEFAULT_TRAFFICLIGHT_URL", "DEFAULT_ELEMENT_WEB_URL"]
