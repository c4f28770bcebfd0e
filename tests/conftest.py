"""
Pytest configuration and shared fixtures for trafficlight agent tests.
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, Mock

import httpx
import pytest

from trafficlight_agent.browser_session import BrowserSession
from trafficlight_agent.config import AgentConfig
from trafficlight_agent.control_client import ControlClient


CONTROL_URL = "http://trafficlight.test"
ELEMENT_URL = "http://element.test"


class TrafficlightStub:
    """
    In-memory control server behind an httpx.MockTransport.

    Serves queued actions from /poll and records every request in order.
    """

    def __init__(self, actions: Optional[List[Dict[str, Any]]] = None, register_status: int = 200):
        self.actions = list(actions or [])
        self.register_status = register_status
        self.poll_status = 200
        self.respond_status = 200
        self.requests: List[httpx.Request] = []
        self.events: List[tuple] = []

    @property
    def responses(self) -> List[str]:
        return [body["response"] for kind, body in self.events if kind == "respond"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/register"):
            self.events.append(("register", json.loads(request.content)))
            return httpx.Response(self.register_status, json={})

        if path.endswith("/poll"):
            self.events.append(("poll", None))
            if self.poll_status != 200:
                return httpx.Response(self.poll_status, text="poll refused")
            action = self.actions.pop(0) if self.actions else {"action": "exit", "data": {}}
            return httpx.Response(200, json=action)

        if path.endswith("/respond"):
            self.events.append(("respond", json.loads(request.content)))
            return httpx.Response(self.respond_status, json={})

        return httpx.Response(404)

    def client(self) -> ControlClient:
        return ControlClient(timeout_seconds=5, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def config() -> AgentConfig:
    """Agent configuration pointed at the test hosts, with no idle delay."""
    return AgentConfig(
        trafficlight_url=CONTROL_URL,
        element_url=ELEMENT_URL,
        idle_seconds=0,
        action_timeout_ms=1000,
    )


@pytest.fixture
def mock_browser():
    """Mock BrowserSession; every primitive succeeds immediately."""
    browser = AsyncMock(spec=BrowserSession)
    browser.find_element = AsyncMock(return_value=MagicMock(name="element"))
    return browser


@pytest.fixture
def mock_page():
    """Mock Playwright page object."""
    page = AsyncMock()

    mock_locator = AsyncMock()
    mock_locator.wait_for = AsyncMock()
    mock_locator.click = AsyncMock()
    mock_locator.press_sequentially = AsyncMock()
    mock_locator.press = AsyncMock()
    mock_locator.filter = Mock(return_value=mock_locator)
    mock_locator.locator = Mock(return_value=mock_locator)

    page.locator = Mock(return_value=mock_locator)
    page.goto = AsyncMock(return_value=None)
    page.screenshot = AsyncMock(return_value=b"fake_screenshot_data")
    page.set_default_timeout = Mock()

    return page


@pytest.fixture
def login_request_data() -> Dict[str, Any]:
    return {
        "homeserver_url": {"local": "http://hs"},
        "username": "alice",
        "password": "pw",
    }


@pytest.fixture
def trafficlight():
    """Factory for TrafficlightStub control servers."""
    return TrafficlightStub
