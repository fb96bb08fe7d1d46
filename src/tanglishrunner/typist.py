"""
Typist: types romanized text into the converter and reads the result.

Reactive conversion UIs usually re-evaluate only on a delimiter keystroke or
after a debounce, so typing the whole string at once and reading immediately
risks stale or partial output. The Typist therefore:

1. types one word at a time with a human-like per-character delay,
2. presses Space after each word,
3. pauses briefly so the page's own conversion can run,
4. pauses once more after the last word before reading the value.
"""

import logging
from typing import Optional

from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeoutError

from .config import TanglishRunnerConfig, get_config
from .errors import ElementNotFoundError
from .logging_config import log_browser_action
from .models import ConversionResult
from .navigator import Navigator
from .text_utils import split_words

logger = logging.getLogger(__name__)


class Typist:
    """Conversion-input driver for one page."""

    def __init__(
        self,
        page: Page,
        config: Optional[TanglishRunnerConfig] = None,
        navigator: Optional[Navigator] = None
    ):
        self.page = page
        self.config = config or get_config()
        self.navigator = navigator or Navigator(page, self.config)

    async def type_and_extract(self, url: Optional[str], text: str) -> ConversionResult:
        """
        Load the page, type text word by word and return the converted value.

        Args:
            url: Page to load (defaults to config.target_url)
            text: Romanized input; split on any whitespace

        Returns:
            ConversionResult with the raw and normalized value and the element

        Raises:
            TransientNavigationError: From the Navigator
            ElementNotFoundError: If the input never becomes visible
        """
        await self.navigator.ensure_loaded(url)
        element = await self._prepare_input()

        words = split_words(text)
        logger.debug(f"Typing {len(words)} word(s): {words}")

        for word in words:
            await element.press_sequentially(word, delay=self.config.inter_key_delay_ms)
            # Space commits the word; the page converts on it
            await self.page.keyboard.press('Space')
            await self.page.wait_for_timeout(self.config.post_word_settle_ms)

        await self.page.wait_for_timeout(self.config.final_settle_ms)

        return await self._extract(element)

    async def type_once(self, url: Optional[str], text: str) -> ConversionResult:
        """
        Liveness variant: type the whole input in one run, press Space once,
        wait a fixed settle pause and read the value.

        Raises:
            TransientNavigationError: From the Navigator
            ElementNotFoundError: If the input never becomes visible
        """
        await self.navigator.ensure_loaded(url)
        element = await self._prepare_input()

        await element.press_sequentially(text, delay=self.config.liveness_key_delay_ms)
        await self.page.keyboard.press('Space')
        await self.page.wait_for_timeout(self.config.liveness_settle_ms)

        return await self._extract(element)

    async def _prepare_input(self) -> Locator:
        """Wait for the input to be visible, focus it and clear it."""
        selector = self.config.input_selector
        timeout_ms = self.config.element_wait_timeout_ms
        element = self.page.locator(selector)

        try:
            await element.wait_for(state='visible', timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            log_browser_action('locate', f"{selector} not visible after {timeout_ms}ms", success=False, logger=logger)
            raise ElementNotFoundError(selector, timeout_ms, cause=e) from e

        await element.click(force=True)
        await element.fill('')
        log_browser_action('locate', f"{selector} visible and cleared", logger=logger)
        return element

    async def _extract(self, element: Locator) -> ConversionResult:
        raw_value = await element.input_value()
        result = ConversionResult.from_raw(raw_value, element=element)
        log_browser_action('extract', repr(result.normalized_value), logger=logger)
        return result
