"""
Navigator: loads the target page with a small bounded retry.

Page loads against a live remote service are flaky. A few attempts absorb
network and DNS hiccups without hiding a page that is really down.
"""

import logging
from typing import Optional

from playwright.async_api import Page

from .config import TanglishRunnerConfig, get_config
from .errors import TransientNavigationError
from .logging_config import log_browser_action

logger = logging.getLogger(__name__)


class Navigator:
    """Drives page.goto with retry for one page."""

    def __init__(self, page: Page, config: Optional[TanglishRunnerConfig] = None):
        self.page = page
        self.config = config or get_config()

    async def ensure_loaded(self, url: Optional[str] = None) -> None:
        """
        Load url, waiting only for DOMContentLoaded.

        Up to config.nav_retries attempts, each bounded by nav_timeout_ms,
        with nav_retry_delay_ms between failed attempts.

        Args:
            url: Page to load (defaults to config.target_url)

        Raises:
            TransientNavigationError: When every attempt failed, chained to the
                                      last underlying error
        """
        url = url or self.config.target_url
        attempts = self.config.nav_retries
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                if attempt > 1:
                    logger.warning(
                        f"   Retry attempt {attempt}/{attempts} after "
                        f"{self.config.nav_retry_delay_ms / 1000}s delay..."
                    )
                    await self.page.wait_for_timeout(self.config.nav_retry_delay_ms)

                await self.page.goto(
                    url,
                    wait_until='domcontentloaded',
                    timeout=self.config.nav_timeout_ms
                )
                log_browser_action('navigate', f"{url} (attempt {attempt}/{attempts})", logger=logger)
                return

            except Exception as nav_error:
                last_error = nav_error
                logger.warning(
                    f"   Navigation failed on attempt {attempt}/{attempts}: "
                    f"{type(nav_error).__name__}: {nav_error}"
                )

        log_browser_action('navigate', f"{url} gave up after {attempts} attempts", success=False, logger=logger)
        raise TransientNavigationError(url, attempts, cause=last_error) from last_error
