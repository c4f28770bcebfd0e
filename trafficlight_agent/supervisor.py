"""
Supervisor - Decides what happens when a session ends.

once:    run a single session; fatal control errors propagate so the process
         exits non-zero and whatever launched it (CI) takes over.
forever: start a new registration cycle after every session. A fatal error
         is logged and followed by an exponential backoff before the next
         cycle; a session that ends with "exit" resets the backoff.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from trafficlight_agent.agent_loop import SessionSummary
from trafficlight_agent.errors import ControlError


logger = logging.getLogger(__name__)


class RunMode(Enum):
    ONCE = "once"
    FOREVER = "forever"

    @classmethod
    def parse(cls, value: str) -> "RunMode":
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Unknown run mode '{value}', expected one of: {', '.join(m.value for m in cls)}"
            ) from None


class RestartBackoff:
    """Doubling delay between failed sessions, capped at a maximum."""

    def __init__(self, initial: float = 1.0, maximum: float = 60.0):
        self.initial = initial
        self.maximum = maximum
        self.failures = 0

    def next_delay(self) -> float:
        delay = min(self.initial * (2 ** self.failures), self.maximum)
        # stop counting at the cap so the exponent stays small
        if delay < self.maximum:
            self.failures += 1
        return delay

    def reset(self) -> None:
        self.failures = 0


class Supervisor:
    """Owns the run mode and restart policy around AgentLoop sessions."""

    def __init__(
        self,
        run_session: Callable[[], Awaitable[SessionSummary]],
        backoff: Optional[RestartBackoff] = None,
    ):
        """
        Args:
            run_session: Coroutine function running one session (AgentLoop.run_session)
            backoff: Restart delay policy for forever mode
        """
        self.run_session = run_session
        self.backoff = backoff or RestartBackoff()
        self.sessions_started = 0

    async def run(self, mode: RunMode) -> Optional[SessionSummary]:
        if mode is RunMode.ONCE:
            self.sessions_started += 1
            return await self.run_session()

        while True:
            self.sessions_started += 1
            try:
                await self.run_session()
            except ControlError as e:
                delay = self.backoff.next_delay()
                logger.error(
                    f"Session aborted by {e.endpoint} failure: {e}; restarting in {delay:.1f}s",
                    extra={"status_code": e.status_code},
                    exc_info=True,
                )
                await asyncio.sleep(delay)
            except Exception:
                delay = self.backoff.next_delay()
                logger.exception(f"Session crashed; restarting in {delay:.1f}s")
                await asyncio.sleep(delay)
            else:
                self.backoff.reset()
