"""
Browser Manager - Single browser session per skill run.

One Chromium instance, one context and one page, reused by every step
of a run and released on all exit paths (use as an async context manager).
"""

import asyncio
from typing import Optional

import structlog
from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from core.config import ChromeConfig

logger = structlog.get_logger()


class BrowserManager:
    """
    Manages a single browser session.

    Features:
    - Single browser context and page (reused across checks)
    - Executable override via BROWSER_EXECUTABLE_PATH
    - Scoped lifetime: `async with BrowserManager(config) as browser`
    """

    def __init__(self, config: Optional[ChromeConfig] = None):
        """
        Initialize browser manager.

        Args:
            config: Browser settings (headless, timeout, viewport, executable path)
        """
        self.config = config or ChromeConfig.from_env()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._lock = asyncio.Lock()
        self._initialized = False

    async def __aenter__(self) -> "BrowserManager":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    async def initialize(self) -> None:
        """Launch browser and open the session page."""
        async with self._lock:
            if self._initialized:
                return

            logger.info(
                "browser_initializing",
                headless=self.config.headless,
                executable_path=self.config.executable_path,
            )

            self._playwright = await async_playwright().start()

            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless,
                    timeout=self.config.timeout,
                    executable_path=self.config.executable_path,
                    args=[
                        "--disable-dev-shm-usage",  # Overcome limited /dev/shm in Docker
                        "--no-sandbox",
                        "--disable-setuid-sandbox",
                        "--disable-gpu",
                    ],
                )

                self._context = await self._browser.new_context(
                    viewport={
                        "width": self.config.viewport_width,
                        "height": self.config.viewport_height,
                    },
                    user_agent=self.config.user_agent,
                )
                self._context.set_default_timeout(self.config.timeout)

                self._page = await self._context.new_page()
            except Exception:
                await self._playwright.stop()
                self._playwright = None
                raise

            self._initialized = True
            logger.info("browser_initialized")

    async def shutdown(self) -> None:
        """Close page, context and browser; stop Playwright."""
        async with self._lock:
            if not self._initialized:
                return

            logger.info("browser_shutting_down")

            try:
                if self._context:
                    await self._context.close()
                    self._context = None
                    self._page = None

                if self._browser:
                    await self._browser.close()
                    self._browser = None
            finally:
                if self._playwright:
                    await self._playwright.stop()
                    self._playwright = None
                self._initialized = False

            logger.info("browser_shutdown_complete")

    async def get_page(self) -> Page:
        """
        Get the session page.

        Ensures browser is initialized; reopens the page if it was closed.
        """
        if not self._initialized:
            await self.initialize()

        if not self._page or self._page.is_closed():
            async with self._lock:
                self._page = await self._context.new_page()

        return self._page

    @property
    def is_initialized(self) -> bool:
        """Check if browser is initialized."""
        return self._initialized
