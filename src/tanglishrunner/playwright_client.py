"""
Playwright client owning one browser session.

Each test case gets its own client: launch -> one page -> close. Nothing is
shared between cases, so cases can run concurrently in separate browsers.
Supports Chromium (default), Firefox and WebKit.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
from playwright.async_api import async_playwright, Page, Browser, BrowserContext, Playwright
import logging

from .config import TanglishRunnerConfig, get_config

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Browser session for one test case.

    Use as an async context manager:

        async with PlaywrightClient(config) as client:
            typist = Typist(client.page, config)
    """

    def __init__(self, config: Optional[TanglishRunnerConfig] = None):
        """
        Initialize Playwright client with configuration.

        Args:
            config: TanglishRunnerConfig with browser settings (global if None)
        """
        self.config = config or get_config()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def launch(self) -> Page:
        """
        Launch the configured browser and open a page.

        Returns:
            The new Page
        """
        if self.page:
            return self.page

        self.playwright = await async_playwright().start()

        if self.config.browser_type == "webkit":
            browser_launcher = self.playwright.webkit
        elif self.config.browser_type == "firefox":
            browser_launcher = self.playwright.firefox
        else:
            browser_launcher = self.playwright.chromium

        self.browser = await browser_launcher.launch(**self.config.launch_options)
        self.context = await self.browser.new_context(**self.config.context_options)
        self.page = await self.context.new_page()

        logger.info(
            f"Browser launched: {self.config.browser_type} "
            f"(headless={self.config.headless}, viewport={self.config.viewport_width}x{self.config.viewport_height})"
        )
        return self.page

    async def take_screenshot(self, label: str = "screenshot") -> Optional[Path]:
        """
        Save a viewport screenshot to the configured screenshot directory.

        Args:
            label: Label used in the file name (usually the case id)

        Returns:
            Path of the saved file, or None if disabled or capture failed
        """
        if not self.page or not self.config.save_screenshots:
            return None

        try:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")[:-3]
            screenshot_path = self.config.get_screenshot_path(f"screenshot_{timestamp}_{label}.png")
            screenshot_path.parent.mkdir(parents=True, exist_ok=True)

            await self.page.screenshot(path=str(screenshot_path), full_page=False)
            logger.debug(f"  Screenshot saved: {screenshot_path.name}")
            return screenshot_path

        except Exception as e:
            logger.warning(f"  Screenshot failed for {label}: {e}")
            return None

    async def close(self):
        """
        Close browser and clean up resources.

        Always safe to call, including after a failed launch.
        """
        try:
            if self.browser:
                await self.browser.close()
                logger.info("Browser closed")

            if self.playwright:
                await self.playwright.stop()

        except Exception as e:
            logger.warning(f"Error closing browser: {e}")

        finally:
            self.browser = None
            self.context = None
            self.page = None
            self.playwright = None

    async def __aenter__(self):
        """Async context manager entry."""
        try:
            await self.launch()
        except Exception:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
