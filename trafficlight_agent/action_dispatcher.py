"""
Action Dispatcher - Turns a named action into browser operations and a token.

Each action is a fixed sequence of steps against element-web. Every step
waits for its element through the BrowserSession, so a missing element ends
the action with ElementNotFoundError instead of racing the app's rendering.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlsplit, urlunsplit

from trafficlight_agent import dom_selectors as sel
from trafficlight_agent.browser_session import BrowserSession
from trafficlight_agent.errors import ActionDispatchError
from trafficlight_agent.protocol import ActionRequest, ActionResult


logger = logging.getLogger(__name__)


def _require(data: Dict[str, Any], *path: str) -> Any:
    """Look up a nested value in the action data, e.g. _require(data, "homeserver_url", "local")."""
    if not isinstance(data, dict):
        raise ActionDispatchError(f"Action data must be an object, got {type(data).__name__}")
    value: Any = data
    for key in path:
        if not isinstance(value, dict) or key not in value:
            raise ActionDispatchError(f"Action data is missing '{'.'.join(path)}'")
        value = value[key]
    if value is None:
        raise ActionDispatchError(f"Action data '{'.'.join(path)}' is null")
    return value


class ActionDispatcher:
    """Executes trafficlight actions against element-web."""

    def __init__(self, browser: BrowserSession, element_url: str, idle_seconds: float = 5.0):
        """
        Initialize action dispatcher.

        Args:
            browser: Started BrowserSession for this session
            element_url: Base URL of the element-web instance
            idle_seconds: How long the "idle" action waits
        """
        self.browser = browser
        self.element_url = element_url
        self.idle_seconds = idle_seconds
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[ActionResult]]] = {
            "register": self.register,
            "login": self.login,
            "start_crosssign": self.start_crosssign,
            "accept_crosssign": self.accept_crosssign,
            "verify_crosssign_emoji": self.verify_crosssign_emoji,
            "idle": self.idle,
            "create_room": self.create_room,
            "send_message": self.send_message,
            "change_room_history_visibility": self.change_room_history_visibility,
            "invite_user": self.invite_user,
        }

    def supported_actions(self) -> List[str]:
        return list(self._handlers)

    async def dispatch(self, request: ActionRequest) -> ActionResult:
        """
        Run one action.

        Args:
            request: Action received from the control server

        Returns:
            Completion token, or None when no response should be sent
            (idle and unknown actions)

        Raises:
            ActionDispatchError: If the action could not be carried out. Other
                exceptions from the browser backend propagate as they are.
        """
        handler = self._handlers.get(request.action) if isinstance(request.action, str) else None
        if handler is None:
            logger.warning(f"Unknown action {request.action!r}, ignoring", extra={"action": request.action})
            return None
        return await handler(request.data)

    # -- helpers --

    async def _open_app(self, fragment: str) -> None:
        parts = urlsplit(self.element_url)
        await self.browser.navigate(urlunsplit(parts._replace(fragment=fragment)))

    async def _click(self, selector: str, scope: Any = None, has_text: Optional[str] = None) -> None:
        element = await self.browser.find_element(selector, scope=scope, has_text=has_text)
        await self.browser.click(element)

    async def _type(self, selector: str, text: str) -> Any:
        element = await self.browser.find_element(selector)
        await self.browser.type(element, str(text))
        return element

    async def _choose_homeserver(self, homeserver_url: str) -> None:
        await self._click(sel.SERVER_PICKER_CHANGE)
        await self._type(sel.SERVER_PICKER_HOMESERVER, homeserver_url)
        await self._click(sel.SERVER_PICKER_CONTINUE)
        await self.browser.wait_for(sel.SERVER_PICKER_DIALOG, state="detached")

    # -- actions --

    async def register(self, data: Dict[str, Any]) -> ActionResult:
        homeserver_url = _require(data, "homeserver_url", "local")
        username = _require(data, "username")
        password = _require(data, "password")

        await self._open_app("/register")
        await self._choose_homeserver(homeserver_url)
        await self.browser.wait_for(sel.REGISTRATION_USERNAME, state="visible")
        await self._type(sel.REGISTRATION_USERNAME, username)
        await self._type(sel.REGISTRATION_PASSWORD, password)
        await self._type(sel.REGISTRATION_PASSWORD_CONFIRM, password)
        await self._click(sel.LOGIN_SUBMIT)
        await self._click(sel.USE_CASE_SKIP)
        return "registered"

    async def login(self, data: Dict[str, Any]) -> ActionResult:
        homeserver_url = _require(data, "homeserver_url", "local")
        username = _require(data, "username")
        password = _require(data, "password")

        await self._open_app("/login")
        await self.browser.wait_for(sel.LOGIN_USERNAME, state="visible")
        await self._choose_homeserver(homeserver_url)
        await self._type(sel.LOGIN_USERNAME, username)
        await self._type(sel.LOGIN_PASSWORD, password)
        await self._click(sel.LOGIN_SUBMIT)
        return "loggedin"

    async def start_crosssign(self, data: Dict[str, Any]) -> ActionResult:
        await self._click(sel.COMPLETE_SECURITY_START)
        return "started_crosssign"

    async def accept_crosssign(self, data: Dict[str, Any]) -> ActionResult:
        # "Verify" on the incoming request toast, then switch to emoji verification
        await self._click(sel.TOAST_VERIFY)
        await self._click(sel.VERIFY_WITH_EMOJI)
        return "accepted_crosssign"

    async def verify_crosssign_emoji(self, data: Dict[str, Any]) -> ActionResult:
        await self._click(sel.SAS_CONFIRM)
        await self._click(sel.USER_INFO_DONE)
        return "verified_crosssign"

    async def idle(self, data: Dict[str, Any]) -> ActionResult:
        await asyncio.sleep(self.idle_seconds)
        return None

    async def create_room(self, data: Dict[str, Any]) -> ActionResult:
        name = _require(data, "name")
        topic = data.get("topic")

        await self._click(sel.ROOM_LIST_PLUS)
        menu = await self.browser.find_element(sel.CONTEXT_MENU)
        await self._click(sel.CONTEXT_MENU_OPTION, scope=menu, has_text=sel.NEW_ROOM_LABEL)
        await self._type(sel.CREATE_ROOM_NAME, name)
        if topic:
            await self._type(sel.CREATE_ROOM_TOPIC, topic)
        await self._click(sel.DIALOG_PRIMARY)
        return "room_created"

    async def send_message(self, data: Dict[str, Any]) -> ActionResult:
        message = _require(data, "message")

        composer = await self._type(sel.MESSAGE_COMPOSER, message)
        await self.browser.press(composer, "Enter")
        return "message_sent"

    async def change_room_history_visibility(self, data: Dict[str, Any]) -> ActionResult:
        visibility = _require(data, "historyVisibility")
        if visibility not in sel.HISTORY_VISIBILITIES:
            raise ActionDispatchError(
                f"historyVisibility must be one of {', '.join(sel.HISTORY_VISIBILITIES)}, got {visibility!r}"
            )

        await self._click(sel.ROOM_SUMMARY_BUTTON)
        await self._click(sel.ROOM_SUMMARY_SETTINGS)
        await self._click(sel.SECURITY_TAB)
        await self._click(sel.history_visibility_option(visibility))
        await self._click(sel.DIALOG_CANCEL)
        await self._click(sel.BASE_CARD_CLOSE)
        return "changed"

    async def invite_user(self, data: Dict[str, Any]) -> ActionResult:
        user = _require(data, "user")

        await self._click(sel.ROOM_SUMMARY_BUTTON)
        await self._click(sel.ROOM_SUMMARY_PEOPLE)
        await self._click(sel.MEMBER_LIST_INVITE)
        address_bar = await self._type(sel.INVITE_ADDRESS_BAR, user)
        await self.browser.press(address_bar, "Enter")
        await self._click(sel.INVITE_GO)
        return "invited"
