"""
Pytest configuration and fixtures for TanglishRunner tests.

Provides the session config, logging setup, markers, the --live gate for
tests that drive the real transliteration page, and fake Playwright objects
that record every browser call so the typing protocol can be checked offline.
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from tanglishrunner.config import TanglishRunnerConfig, get_test_config, set_config
from tanglishrunner.logging_config import setup_logging


TEST_OUTPUT_DIR = Path(__file__).parent / 'test_output'


@pytest.fixture(scope='session')
def test_config():
    """
    Set up test configuration for the entire test session.

    Uses tests/test_output/ for logs and failure screenshots.
    """
    config = get_test_config(temp_dir=TEST_OUTPUT_DIR)
    config._create_directories()
    set_config(config)

    log_file = config.get_log_path('test_execution.log')
    setup_logging(level='DEBUG', log_file=str(log_file))

    logger = logging.getLogger('tanglishrunner.test')
    logger.info("=" * 80)
    logger.info("TanglishRunner Test Session Started")
    logger.info("=" * 80)
    logger.info(f"Target: {config.target_url} ({config.input_selector})")
    logger.info(f"Screenshots directory: {config.screenshot_dir}")
    logger.info(f"Log file: {log_file}")

    yield config

    logger.info("=" * 80)
    logger.info("TanglishRunner Test Session Complete")
    logger.info("=" * 80)


@pytest.fixture
def fast_config(tmp_path):
    """Config for offline tests; fakes never really sleep but values stay recognizable."""
    return TanglishRunnerConfig(
        target_url="https://converter.test/",
        input_selector="#transliterateTextarea",
        screenshot_dir=tmp_path / "screenshots",
        log_dir=tmp_path / "logs",
        save_screenshots=False,
        case_timeout=10
    )


def pytest_addoption(parser):
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="run tests against the real transliteration website"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "live: drives a real browser against the real website (needs --live)"
    )


def pytest_collection_modifyitems(config, items):
    """Mark live tests as slow integration tests and skip them unless asked for."""
    run_live = config.getoption("--live") or os.getenv("TANGLISHRUNNER_LIVE", "").lower() in ("1", "true", "yes")
    skip_live = pytest.mark.skip(reason="live website test; use --live or TANGLISHRUNNER_LIVE=1")

    for item in items:
        if "live" in item.keywords:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)
            if not run_live:
                item.add_marker(skip_live)


# ============================================================================
# FAKE PLAYWRIGHT OBJECTS
# ============================================================================

class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def press(self, key: str):
        self.page.events.append(('press', key))
        if key == 'Space':
            self.page.typed += ' '


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def wait_for(self, state: str = 'visible', timeout: Optional[int] = None):
        self.page.events.append(('wait_for', self.selector, state, timeout))
        if not self.page.element_visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def click(self, force: bool = False):
        self.page.events.append(('click', force))

    async def fill(self, value: str):
        self.page.events.append(('fill', value))
        self.page.typed = value

    async def press_sequentially(self, text: str, delay: Optional[float] = None):
        self.page.events.append(('type', text, delay))
        self.page.typed += text

    async def input_value(self) -> str:
        self.page.events.append(('input_value',))
        return self.page.converter(self.page.typed)


class FakePage:
    """
    Records calls in `events` in order.

    Args:
        goto_failures: How many goto calls fail before one succeeds
        element_visible: Whether the input ever becomes visible
        converter: Maps the typed text to what the element displays
    """

    def __init__(
        self,
        goto_failures: int = 0,
        element_visible: bool = True,
        converter: Optional[Callable[[str], str]] = None
    ):
        self.goto_failures = goto_failures
        self.element_visible = element_visible
        self.converter = converter or (lambda text: text)
        self.events: List[Tuple] = []
        self.typed = "seed text"
        self.keyboard = FakeKeyboard(self)
        self.screenshots: List[str] = []

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.events.append(('goto', url, wait_until, timeout))
        if self.goto_failures > 0:
            self.goto_failures -= 1
            raise Exception("net::ERR_NAME_NOT_RESOLVED")

    async def wait_for_timeout(self, ms: float):
        self.events.append(('wait', ms))

    def locator(self, selector: str) -> FakeLocator:
        self.events.append(('locator', selector))
        return FakeLocator(self, selector)

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False):
        self.screenshots.append(path)
        return b""

    def calls(self, name: str) -> List[Tuple]:
        return [event for event in self.events if event[0] == name]


class FakeClient:
    """Stands in for PlaywrightClient in runner tests."""

    def __init__(self, config: TanglishRunnerConfig, page: FakePage, launch_error: Optional[Exception] = None):
        self.config = config
        self.page = page
        self.launch_error = launch_error
        self.closed = False
        self.screenshot_labels: List[str] = []

    async def launch(self) -> FakePage:
        if self.launch_error:
            raise self.launch_error
        return self.page

    async def take_screenshot(self, label: str = "screenshot"):
        self.screenshot_labels.append(label)
        return None

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def make_page():
    """Factory for FakePage with custom behaviour."""
    return FakePage


@pytest.fixture
def make_client_factory():
    """
    Build a client_factory for run_case/run_suite.

    Returns (factory, clients) where clients collects every FakeClient made.
    """
    def _make(page_factory: Callable[[], FakePage] = FakePage, launch_error: Optional[Exception] = None):
        clients: List[FakeClient] = []

        def factory(config: TanglishRunnerConfig) -> FakeClient:
            client = FakeClient(config, page_factory(), launch_error=launch_error)
            clients.append(client)
            return client

        return factory, clients

    return _make
