"""
Browser Session - The browser capability the action dispatcher is written against.

One session owns one browser and one page. Every lookup waits for its
element before returning, bounded by the session timeout; running out of
time raises ElementNotFoundError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from playwright.async_api import Browser, Error as PlaywrightError, Locator, Page, Playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from trafficlight_agent.errors import ElementNotFoundError


logger = logging.getLogger(__name__)

WAIT_STATES = ("visible", "hidden", "attached", "detached")


class BrowserSession(ABC):
    """Navigation and element primitives over a single page."""

    def __init__(
        self,
        timeout_ms: int = 15000,
        headless: bool = False,
        executable_path: Optional[str] = None,
    ):
        self.timeout_ms = timeout_ms
        self.headless = headless
        self.executable_path = executable_path

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @abstractmethod
    async def start(self) -> None:
        """Launch the browser and open the page."""

    @abstractmethod
    async def close(self) -> None:
        """Close the page and the browser."""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        ...

    @abstractmethod
    async def find_element(self, selector: str, scope: Any = None, has_text: Optional[str] = None) -> Any:
        """
        Wait for a visible element matching a CSS selector.

        Args:
            selector: CSS selector
            scope: Element returned by an earlier find_element to search inside
            has_text: Only match elements whose text contains this string

        Returns:
            Backend-specific element handle

        Raises:
            ElementNotFoundError: If nothing matched before the timeout
        """

    @abstractmethod
    async def click(self, element: Any) -> None:
        ...

    @abstractmethod
    async def type(self, element: Any, text: str) -> None:
        """Type text into the element key by key."""

    @abstractmethod
    async def press(self, element: Any, key: str) -> None:
        """Press a named key ("Enter", "Escape", ...) on the element."""

    @abstractmethod
    async def wait_for(self, selector: str, state: str = "visible") -> None:
        """
        Wait until the selector reaches a state.

        Args:
            selector: CSS selector
            state: One of "visible", "hidden", "attached", "detached"
        """

    @abstractmethod
    async def screenshot(self, path: str) -> None:
        ...


class PlaywrightSession(BrowserSession):
    """BrowserSession backed by Playwright's async API and Chromium."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.page: Optional[Page] = None

    async def start(self) -> None:
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            executable_path=self.executable_path,
            headless=self.headless,
        )
        self.page = await self.browser.new_page()
        self.page.set_default_timeout(self.timeout_ms)
        logger.debug("Chromium started (headless=%s)", self.headless)

    async def close(self) -> None:
        try:
            if self.browser:
                await self.browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            try:
                if self.playwright:
                    await self.playwright.stop()
            except PlaywrightError as e:
                logger.warning(f"Error stopping Playwright: {e}")
            finally:
                self.page = None
                self.browser = None
                self.playwright = None

    def _require_page(self) -> Page:
        if not self.page:
            raise RuntimeError("Browser not launched. Call start() first.")
        return self.page

    async def navigate(self, url: str) -> None:
        await self._require_page().goto(url)

    async def find_element(self, selector: str, scope: Any = None, has_text: Optional[str] = None) -> Locator:
        root = scope if scope is not None else self._require_page()
        locator = root.locator(selector)
        if has_text:
            locator = locator.filter(has_text=has_text)

        try:
            await locator.wait_for(state="visible", timeout=self.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(selector, self.timeout_ms) from e
        return locator

    async def click(self, element: Locator) -> None:
        await element.click(timeout=self.timeout_ms)

    async def type(self, element: Locator, text: str) -> None:
        await element.press_sequentially(text, timeout=self.timeout_ms)

    async def press(self, element: Locator, key: str) -> None:
        await element.press(key, timeout=self.timeout_ms)

    async def wait_for(self, selector: str, state: str = "visible") -> None:
        if state not in WAIT_STATES:
            raise ValueError(f"Unknown wait state '{state}'")
        try:
            await self._require_page().locator(selector).wait_for(state=state, timeout=self.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(selector, self.timeout_ms, state=state) from e

    async def screenshot(self, path: str) -> None:
        await self._require_page().screenshot(path=path, full_page=True)


def create_browser_session(config) -> BrowserSession:
    """
    Build the BrowserSession named by config.browser_backend.

    Args:
        config: AgentConfig

    Returns:
        An unstarted BrowserSession
    """
    options = dict(
        timeout_ms=config.action_timeout_ms,
        headless=config.headless,
        executable_path=config.browser_executable,
    )
    if config.browser_backend == "selenium":
        from trafficlight_agent.selenium_session import SeleniumSession

        return SeleniumSession(**options)
    return PlaywrightSession(**options)
