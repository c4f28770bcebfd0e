"""
Protocol - Wire types shared by the control client and the agent loop.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


EXIT_ACTION = "exit"
ERROR_RESULT = "error"

# None means "send no response", which is not the same as "".
ActionResult = Optional[str]


@dataclass(frozen=True)
class ActionRequest:
    """One instruction received from the control server."""

    action: Any
    data: Any = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: Any) -> "ActionRequest":
        """
        Build a request from a decoded poll body.

        A missing or non-string "action" is kept as is and the dispatcher
        ignores it as an unknown action. A non-object "data" is passed on and
        fails the action that tries to read it.

        Raises:
            ValueError: If the body is not a JSON object
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Poll body must be a JSON object, got {type(payload).__name__}")

        data = payload.get("data")
        if data is None:
            data = {}
        return cls(action=payload.get("action"), data=data)
