"""
Agent Loop - One registration-to-exit session against the control server.

Register, start a browser, then poll → dispatch → respond until the server
sends "exit". Only one request is ever outstanding: the next poll is not
issued until the previous action's response has been sent (or skipped).
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from trafficlight_agent.action_dispatcher import ActionDispatcher
from trafficlight_agent.browser_session import BrowserSession, create_browser_session
from trafficlight_agent.config import AgentConfig
from trafficlight_agent.control_client import ControlClient, session_url
from trafficlight_agent.protocol import ERROR_RESULT, EXIT_ACTION, ActionRequest, ActionResult


logger = logging.getLogger(__name__)


@dataclass
class Session:
    id: str
    control_base_url: str
    browser: BrowserSession


@dataclass
class SessionSummary:
    """What happened during one session."""

    session_id: str
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    actions: int = 0
    responses_sent: int = 0
    errors: int = 0
    exit_requested: bool = False


class SessionTrace:
    """
    Per-session artifacts: a trace.json of every action and a screenshot of
    the page whenever an action fails. Written under ARTIFACT_DIR/<session id>.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.steps: List[Dict[str, Any]] = []

    @classmethod
    def create(cls, artifact_dir: Optional[str], session_id: str) -> Optional["SessionTrace"]:
        if not artifact_dir:
            return None
        return cls(Path(artifact_dir) / session_id)

    def record(self, step: Dict[str, Any]) -> None:
        self.steps.append(step)

    async def capture_error(self, browser: BrowserSession, step: int, action: str) -> Optional[str]:
        path = self.output_dir / f"step_{step:03d}_{action}_error.png"
        try:
            await browser.screenshot(str(path))
        except Exception as e:
            logger.warning(f"Could not capture error screenshot: {e}")
            return None
        return path.name

    def save(self, summary: SessionSummary) -> Path:
        trace_file = self.output_dir / "trace.json"
        trace_data = dict(asdict(summary), steps=self.steps)
        with open(trace_file, "w") as f:
            json.dump(trace_data, f, indent=2, default=str)
        return trace_file


class AgentLoop:
    """Runs sessions against the control server, one at a time."""

    def __init__(
        self,
        config: AgentConfig,
        client: ControlClient,
        browser_factory: Callable[[AgentConfig], BrowserSession] = create_browser_session,
        dispatcher_factory: Callable[..., ActionDispatcher] = ActionDispatcher,
    ):
        self.config = config
        self.client = client
        self.browser_factory = browser_factory
        self.dispatcher_factory = dispatcher_factory

    async def run_session(self) -> SessionSummary:
        """
        Run one full session.

        Returns:
            Summary of the session once the server sent "exit"

        Raises:
            RegistrationError: Registration was refused; no browser was started
            PollError, RespondError: The control server failed mid-session
        """
        session_id = str(uuid.uuid4())
        await self.client.register(self.config.trafficlight_url, session_id)

        session = Session(
            id=session_id,
            control_base_url=session_url(self.config.trafficlight_url, session_id),
            browser=self.browser_factory(self.config),
        )
        summary = SessionSummary(session_id=session_id)
        trace = SessionTrace.create(self.config.artifact_dir, session_id)

        try:
            await session.browser.start()
            await self._poll_loop(session, summary, trace)
        finally:
            await session.browser.close()
            if trace:
                try:
                    trace_file = trace.save(summary)
                except OSError as e:
                    logger.warning(f"Could not save session trace: {e}", extra={"session_id": session_id})
                else:
                    logger.info(f"Session trace saved to {trace_file}", extra={"session_id": session_id})

        logger.info(
            f"Session finished: {summary.actions} actions, {summary.responses_sent} responses, "
            f"{summary.errors} errors",
            extra={"session_id": session_id},
        )
        return summary

    async def _poll_loop(self, session: Session, summary: SessionSummary, trace: Optional[SessionTrace]) -> None:
        dispatcher = self.dispatcher_factory(
            session.browser, self.config.element_url, idle_seconds=self.config.idle_seconds
        )

        while True:
            request = await self.client.poll(session.control_base_url)
            logger.info(f" * running action {request.action}", extra={"session_id": session.id, "action": request.action})

            if request.action == EXIT_ACTION:
                summary.exit_requested = True
                return

            result = await self._dispatch(dispatcher, request, session, summary, trace)
            if result is not None:
                await self.client.respond(session.control_base_url, result)
                summary.responses_sent += 1

    async def _dispatch(
        self,
        dispatcher: ActionDispatcher,
        request: ActionRequest,
        session: Session,
        summary: SessionSummary,
        trace: Optional[SessionTrace],
    ) -> ActionResult:
        """Dispatching state: any failure becomes the "error" result."""
        step = summary.actions
        summary.actions += 1
        started = time.monotonic()
        step_data: Dict[str, Any] = {"step": step, "action": request.action}

        try:
            result = await dispatcher.dispatch(request)
        except Exception as e:
            logger.exception(
                f"Action {request.action} failed",
                extra={"session_id": session.id, "action": request.action},
            )
            summary.errors += 1
            result = ERROR_RESULT
            step_data["error"] = str(e)
            if trace:
                screenshot = await trace.capture_error(session.browser, step, str(request.action))
                if screenshot:
                    step_data["screenshot_error"] = screenshot

        step_data["result"] = result
        step_data["duration_ms"] = int((time.monotonic() - started) * 1000)
        if trace:
            trace.record(step_data)
        return result
