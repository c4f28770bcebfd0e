"""
Control Client - HTTP client for the trafficlight control server.

Three endpoints under {trafficlight_url}/client/{session_id}:
register (POST), poll (GET) and respond (POST). Anything other than
HTTP 200 is fatal for the session.
"""

import json
import logging
from typing import Optional, Type
from urllib.parse import quote

import httpx

from trafficlight_agent.errors import ControlError, PollError, RegistrationError, RespondError
from trafficlight_agent.protocol import ActionRequest


logger = logging.getLogger(__name__)


def session_url(base_url: str, session_id: str) -> str:
    """Base URL of one session's endpoints."""
    return f"{base_url.rstrip('/')}/client/{quote(session_id, safe='')}"


class ControlClient:
    """Client for the register / poll / respond protocol."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        client_type: str = "element-web",
        client_version: str = "UNKNOWN",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize control client.

        Args:
            timeout_seconds: Timeout for each request
            client_type: Client type reported at registration
            client_version: Client version reported at registration
            transport: Optional httpx transport (used by tests)
        """
        self.client_type = client_type
        self.client_version = client_version
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ControlClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def register(self, base_url: str, session_id: str) -> None:
        """
        Register this agent with the control server.

        Args:
            base_url: Control server base URL
            session_id: Fresh random session identifier

        Raises:
            RegistrationError: If the server does not answer with HTTP 200
        """
        logger.info("Registering trafficlight client", extra={"session_id": session_id})
        target = f"{session_url(base_url, session_id)}/register"
        body = {"type": self.client_type, "version": self.client_version}

        response = await self._send(RegistrationError, "POST", target, json=body)
        if response.status_code != 200:
            raise RegistrationError(
                f"Unable to register client, got {response.status_code} from server",
                status_code=response.status_code,
            )
        logger.info(f"Registered to trafficlight as {session_id}", extra={"session_id": session_id})

    async def poll(self, session_base_url: str) -> ActionRequest:
        """
        Fetch the next action for this session.

        Raises:
            PollError: On a non-200 status or a body that is not a valid action
        """
        response = await self._send(PollError, "GET", f"{session_base_url}/poll")
        if response.status_code != 200:
            raise PollError(f"poll failed with {response.status_code}", status_code=response.status_code)

        try:
            return ActionRequest.from_json(response.json())
        except (json.JSONDecodeError, ValueError) as e:
            raise PollError(f"poll returned an unreadable body: {e}", status_code=200) from e

    async def respond(self, session_base_url: str, result: str) -> None:
        """
        Report the result of the last action.

        Raises:
            RespondError: If the server does not answer with HTTP 200
        """
        response = await self._send(
            RespondError, "POST", f"{session_base_url}/respond", json={"response": result}
        )
        if response.status_code != 200:
            raise RespondError(
                f"respond failed with {response.status_code}", status_code=response.status_code
            )

    async def _send(self, error_class: Type[ControlError], method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise error_class(f"{error_class.endpoint} request to {url} failed: {e}") from e
