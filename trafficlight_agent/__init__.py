# Trafficlight Agent - Remote-controlled element-web test client

from trafficlight_agent.action_dispatcher import ActionDispatcher
from trafficlight_agent.agent_loop import AgentLoop, Session, SessionSummary
from trafficlight_agent.browser_session import BrowserSession, PlaywrightSession, create_browser_session
from trafficlight_agent.config import AgentConfig
from trafficlight_agent.control_client import ControlClient
from trafficlight_agent.protocol import ActionRequest
from trafficlight_agent.supervisor import RunMode, Supervisor

__all__ = [
    "ActionDispatcher",
    "ActionRequest",
    "AgentConfig",
    "AgentLoop",
    "BrowserSession",
    "ControlClient",
    "PlaywrightSession",
    "RunMode",
    "Session",
    "SessionSummary",
    "Supervisor",
    "create_browser_session",
]
