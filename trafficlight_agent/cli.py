"""
CLI entry point for the trafficlight agent.

Usage: trafficlight-agent [once|forever]
"""

import asyncio
import logging
import sys
from typing import List, Optional

from trafficlight_agent.agent_loop import AgentLoop
from trafficlight_agent.config import AgentConfig
from trafficlight_agent.control_client import ControlClient
from trafficlight_agent.errors import AgentError, ConfigError
from trafficlight_agent.logging_config import setup_logging
from trafficlight_agent.supervisor import RestartBackoff, RunMode, Supervisor


logger = logging.getLogger(__name__)

DEFAULT_MODE = RunMode.FOREVER


def usage() -> str:
    modes = "|".join(m.value for m in RunMode)
    return f"Usage: trafficlight-agent [{modes}]"


async def run_agent(config: AgentConfig, mode: RunMode) -> None:
    async with ControlClient(
        timeout_seconds=config.http_timeout,
        client_type=config.client_type,
        client_version=config.client_version,
    ) as client:
        loop = AgentLoop(config, client)
        supervisor = Supervisor(
            loop.run_session,
            RestartBackoff(config.restart_backoff_initial, config.restart_backoff_max),
        )
        await supervisor.run(mode)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv

    if len(args) > 1:
        print(usage(), file=sys.stderr)
        return 1
    try:
        mode = RunMode.parse(args[0]) if args else DEFAULT_MODE
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(usage(), file=sys.stderr)
        return 1

    try:
        config = AgentConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_format)
    logger.info(
        f"Starting trafficlight agent ({mode.value}) against {config.trafficlight_url}, "
        f"app at {config.element_url}, browser {config.browser_backend}"
    )

    try:
        asyncio.run(run_agent(config, mode))
    except AgentError:
        logger.exception("Agent stopped on a fatal error")
        return 1
    except Exception:
        logger.exception("Agent crashed")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
