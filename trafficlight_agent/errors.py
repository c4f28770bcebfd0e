"""
Errors - Exception taxonomy for the trafficlight agent.

Control errors are fatal for the current session and are handled by the
supervisor. Dispatch errors never leave the Dispatching state: the agent loop
turns them into the "error" response.
"""

from typing import Optional


class AgentError(Exception):
    """Base class for all agent errors."""


class ConfigError(AgentError):
    """Invalid or missing configuration value."""


class ControlError(AgentError):
    """A request to the control server failed."""

    endpoint = "control"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RegistrationError(ControlError):
    endpoint = "register"


class PollError(ControlError):
    endpoint = "poll"


class RespondError(ControlError):
    endpoint = "respond"


class ActionDispatchError(AgentError):
    """An action could not be carried out against the page."""


class ElementNotFoundError(ActionDispatchError):
    """An element did not reach the expected state before the timeout."""

    def __init__(self, selector: str, timeout_ms: int, state: str = "visible"):
        super().__init__(
            f"Element '{selector}' not {state} after {timeout_ms}ms"
        )
        self.selector = selector
        self.timeout_ms = timeout_ms
        self.state = state
