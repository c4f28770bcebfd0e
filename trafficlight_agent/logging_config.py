"""
Logging setup for the trafficlight agent.

Two console modes, picked by LOG_FORMAT:
- "pretty" (default): coloured single-line output for people watching a run
- "json": one JSON object per line for CI log collection
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class ColoredConsoleFormatter(logging.Formatter):
    """Console formatter with colours for the log level."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[95m",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S")
        prefix = self.BOLD if record.levelno >= logging.ERROR else ""

        line = f"{prefix}{level_color}[{record.levelname}]{self.RESET} {timestamp} | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredJSONFormatter(logging.Formatter):
    """Formats records as JSON with the agent's structured fields."""

    EXTRA_FIELDS = ("session_id", "action", "result", "status_code")

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", log_format: str = "pretty") -> None:
    """
    Configure the root logger for the agent process.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "pretty" or "json"
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        console_handler.setFormatter(StructuredJSONFormatter())
    else:
        console_handler.setFormatter(ColoredConsoleFormatter())
    logger.addHandler(console_handler)

    # Library chatter
    for name in ("httpx", "httpcore", "urllib3", "selenium", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)
