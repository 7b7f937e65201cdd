"""
Page Context - Execution context for page-level browser actions.

Wraps a Playwright page so each step reports an ActionResult
instead of raising, with timing and optional error screenshots.
"""

import asyncio
import time
from typing import Any, Optional
from dataclasses import dataclass

import structlog
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

logger = structlog.get_logger()


@dataclass
class ActionResult:
    """Result of a page action."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    duration_ms: float = 0


class PageContext:
    """
    Execution context for page operations.

    Wraps a Playwright page with:
    - Uniform success/error results
    - Default timeouts
    - Settle delays for script-heavy pages
    """

    def __init__(self, page: Page, default_timeout: int = 30000):
        """
        Initialize page context.

        Args:
            page: Playwright page instance
            default_timeout: Default timeout in milliseconds
        """
        self.page = page
        self.default_timeout = default_timeout
        self._action_count = 0

    async def navigate(
        self,
        url: str,
        wait_until: str = "networkidle",
        timeout: Optional[int] = None,
        settle_ms: int = 0,
    ) -> ActionResult:
        """
        Navigate to URL.

        Args:
            url: Target URL
            wait_until: Wait condition (load, domcontentloaded, networkidle)
            timeout: Override default timeout
            settle_ms: Extra fixed delay after the wait condition is met
        """
        start_time = time.monotonic()
        try:
            await self.page.goto(
                url,
                wait_until=wait_until,
                timeout=timeout or self.default_timeout,
            )
            if settle_ms > 0:
                await self.page.wait_for_timeout(settle_ms)
            self._action_count += 1

            return ActionResult(
                success=True,
                data={"url": self.page.url, "title": await self.page.title()},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

        except Exception as e:
            return self._failure(e, start_time, url=url)

    async def click(self, selector: str, timeout: Optional[int] = None) -> ActionResult:
        """Click an element."""
        start_time = time.monotonic()
        try:
            await self.page.click(selector, timeout=timeout or self.default_timeout)
            self._action_count += 1
            return ActionResult(
                success=True,
                data={"selector": selector, "action": "click"},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time, selector=selector)

    async def type_text(
        self,
        selector: str,
        text: str,
        wait_timeout: int = 5000,
        delay: int = 0,
    ) -> ActionResult:
        """
        Wait for an input, then type text into it.

        Args:
            selector: CSS selector for input element
            text: Text to type
            wait_timeout: How long to wait for the element to appear
            delay: Delay between keystrokes in ms
        """
        start_time = time.monotonic()
        try:
            await self.page.wait_for_selector(selector, timeout=wait_timeout)
            await self.page.type(selector, text, delay=delay)
            self._action_count += 1
            return ActionResult(
                success=True,
                data={"selector": selector, "action": "type", "length": len(text)},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time, selector=selector)

    async def wait_for_selector(
        self,
        selector: str,
        state: str = "visible",
        timeout: Optional[int] = None,
    ) -> ActionResult:
        """
        Wait for element to appear.

        Args:
            selector: CSS selector
            state: Target state (attached, detached, visible, hidden)
            timeout: Override default timeout
        """
        start_time = time.monotonic()
        try:
            await self.page.wait_for_selector(
                selector,
                state=state,
                timeout=timeout or self.default_timeout,
            )
            return ActionResult(
                success=True,
                data={"selector": selector, "state": state},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time, selector=selector)

    async def wait_for_navigation(self, timeout: Optional[int] = None) -> ActionResult:
        """
        Wait for a pending navigation to finish loading.

        A timeout is reported as a successful "no navigation" result.
        """
        start_time = time.monotonic()
        try:
            await self.page.wait_for_load_state(
                "load",
                timeout=timeout or self.default_timeout,
            )
            return ActionResult(
                success=True,
                data={"url": self.page.url, "navigated": True},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except PlaywrightTimeoutError:
            logger.info("no_navigation_occurred", url=self.page.url)
            return ActionResult(
                success=True,
                data={"url": self.page.url, "navigated": False},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

    async def extract_text(self, selector: str, timeout: Optional[int] = None) -> ActionResult:
        """Extract text content from the first matching element."""
        start_time = time.monotonic()
        try:
            element = await self.page.wait_for_selector(
                selector,
                timeout=timeout or self.default_timeout,
            )
            text = await element.text_content()
            return ActionResult(
                success=True,
                data={"text": text or "", "selector": selector},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time, selector=selector)

    async def evaluate(self, script: str, arg: Optional[Any] = None) -> ActionResult:
        """Execute JavaScript in page context."""
        start_time = time.monotonic()
        try:
            result = await self.page.evaluate(script, arg)
            return ActionResult(
                success=True,
                data={"result": result},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time)

    async def screenshot(
        self,
        path: str,
        full_page: bool = False,
        selector: Optional[str] = None,
    ) -> ActionResult:
        """
        Take screenshot of the page or of one element.

        Args:
            path: File path to save
            full_page: Capture full scrollable page
            selector: Capture only this element (waits for it)
        """
        start_time = time.monotonic()
        try:
            if selector:
                element = await self.page.wait_for_selector(selector, timeout=self.default_timeout)
                screenshot_bytes = await element.screenshot(path=path)
            else:
                screenshot_bytes = await self.page.screenshot(path=path, full_page=full_page)

            return ActionResult(
                success=True,
                data={"path": path, "size": len(screenshot_bytes)},
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            return self._failure(e, start_time, selector=selector)

    async def pause(self, ms: int) -> None:
        """Fixed delay between steps."""
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    def _failure(self, error: Exception, start_time: float, **context: Any) -> ActionResult:
        logger.warning("page_action_failed", error=str(error), **context)
        return ActionResult(
            success=False,
            error=str(error),
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    @property
    def url(self) -> str:
        """Get current page URL."""
        return self.page.url

    @property
    def action_count(self) -> int:
        """Get total action count."""
        return self._action_count
