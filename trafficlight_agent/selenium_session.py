"""
Selenium Session - BrowserSession backed by Selenium's Chrome WebDriver.

WebDriver calls block, so each one runs in a worker thread through
asyncio.to_thread and the event loop keeps turning while the browser works.
"""

import asyncio
import logging
from typing import Any, Optional

from selenium import webdriver
from selenium.common.exceptions import StaleElementReferenceException, TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from trafficlight_agent.browser_session import WAIT_STATES, BrowserSession
from trafficlight_agent.errors import ElementNotFoundError


logger = logging.getLogger(__name__)


def resolve_key(key: str) -> str:
    """Map a key name such as "Enter" or "ArrowDown" to a Selenium key code."""
    name = key.upper()
    if name.startswith("ARROW"):
        name = "ARROW_" + name[len("ARROW"):]
    code = getattr(Keys, name, None)
    if code is None:
        if len(key) == 1:
            return key
        raise ValueError(f"Unknown key '{key}'")
    return code


class _VisibleMatch:
    """Wait condition: first displayed element under root matching selector and text."""

    def __init__(self, root: Any, selector: str, has_text: Optional[str]):
        self.root = root
        self.selector = selector
        self.has_text = has_text

    def __call__(self, _driver):
        try:
            for element in self.root.find_elements(By.CSS_SELECTOR, self.selector):
                if not element.is_displayed():
                    continue
                if self.has_text and self.has_text not in element.text:
                    continue
                return element
        except StaleElementReferenceException:
            pass
        return False


class SeleniumSession(BrowserSession):
    """BrowserSession backed by Selenium and Chrome."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.driver: Optional[webdriver.Chrome] = None

    def _launch(self) -> webdriver.Chrome:
        options = webdriver.ChromeOptions()
        if self.executable_path:
            options.binary_location = self.executable_path
        if self.headless:
            options.add_argument("--headless=new")
        driver = webdriver.Chrome(options=options)
        driver.set_page_load_timeout(self.timeout_ms / 1000.0)
        return driver

    async def start(self) -> None:
        self.driver = await asyncio.to_thread(self._launch)
        logger.debug("Chrome WebDriver started (headless=%s)", self.headless)

    async def close(self) -> None:
        if not self.driver:
            return
        try:
            await asyncio.to_thread(self.driver.quit)
        except WebDriverException as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self.driver = None

    def _require_driver(self) -> webdriver.Chrome:
        if not self.driver:
            raise RuntimeError("Browser not launched. Call start() first.")
        return self.driver

    def _wait(self) -> WebDriverWait:
        return WebDriverWait(self._require_driver(), self.timeout_ms / 1000.0)

    async def navigate(self, url: str) -> None:
        await asyncio.to_thread(self._require_driver().get, url)

    async def find_element(self, selector: str, scope: Any = None, has_text: Optional[str] = None) -> WebElement:
        root = scope if scope is not None else self._require_driver()
        condition = _VisibleMatch(root, selector, has_text)
        try:
            return await asyncio.to_thread(self._wait().until, condition)
        except TimeoutException as e:
            raise ElementNotFoundError(selector, self.timeout_ms) from e

    async def click(self, element: WebElement) -> None:
        def _click():
            self._wait().until(EC.element_to_be_clickable(element)).click()

        try:
            await asyncio.to_thread(_click)
        except TimeoutException as e:
            raise ElementNotFoundError("element", self.timeout_ms, state="clickable") from e

    async def type(self, element: WebElement, text: str) -> None:
        await asyncio.to_thread(element.send_keys, text)

    async def press(self, element: WebElement, key: str) -> None:
        await asyncio.to_thread(element.send_keys, resolve_key(key))

    async def wait_for(self, selector: str, state: str = "visible") -> None:
        if state not in WAIT_STATES:
            raise ValueError(f"Unknown wait state '{state}'")

        locator = (By.CSS_SELECTOR, selector)
        conditions = {
            "visible": EC.visibility_of_element_located(locator),
            "hidden": EC.invisibility_of_element_located(locator),
            "attached": EC.presence_of_element_located(locator),
            "detached": lambda driver: not driver.find_elements(*locator),
        }
        try:
            await asyncio.to_thread(self._wait().until, conditions[state])
        except TimeoutException as e:
            raise ElementNotFoundError(selector, self.timeout_ms, state=state) from e

    async def screenshot(self, path: str) -> None:
        await asyncio.to_thread(self._require_driver().save_screenshot, path)
