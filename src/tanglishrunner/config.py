"""
Configuration management for the TanglishRunner test harness.

Loads configuration from environment variables (TANGLISHRUNNER_ prefix) and an
optional .env file, with defaults tuned against the live transliteration page.
Every delay and timeout is a field here; code never hard-codes one.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TARGET_URL = "https://tamil.changathi.com/"
DEFAULT_INPUT_SELECTOR = "#transliterateTextarea"


class TanglishRunnerConfig(BaseSettings):
    """Configuration for the TanglishRunner harness."""

    # Target page
    target_url: str = Field(
        default=DEFAULT_TARGET_URL,
        description="Page hosting the Thanglish -> Tamil converter"
    )

    input_selector: str = Field(
        default=DEFAULT_INPUT_SELECTOR,
        description="Selector of the text input the page converts in place"
    )

    # Browser Configuration
    browser_type: str = Field(
        default="chromium",
        pattern=r"^(chromium|firefox|webkit)$",
        description="Browser engine: 'chromium', 'firefox', or 'webkit'"
    )

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode. Local debugging: False, CI: True"
    )

    slow_mo: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Slow down browser actions by N milliseconds (for debugging)"
    )

    viewport_width: int = Field(default=1280, ge=800, le=3840)
    viewport_height: int = Field(default=1024, ge=600, le=2160)

    # Typing cadence (milliseconds)
    inter_key_delay_ms: int = Field(
        default=60,
        ge=0,
        le=1000,
        description="Delay between characters while typing a word"
    )

    post_word_settle_ms: int = Field(
        default=200,
        ge=0,
        le=10000,
        description="Pause after the Space keystroke that commits each word"
    )

    final_settle_ms: int = Field(
        default=800,
        ge=0,
        le=30000,
        description="Pause after the last word before reading the converted text"
    )

    liveness_key_delay_ms: int = Field(
        default=50,
        ge=0,
        le=1000,
        description="Per-character delay for the UI liveness check"
    )

    liveness_settle_ms: int = Field(
        default=500,
        ge=0,
        le=30000,
        description="Pause after the liveness check's single Space keystroke"
    )

    # Navigation
    nav_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total navigation attempts before the case fails"
    )

    nav_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        le=180000,
        description="Per-attempt navigation timeout (waits for DOMContentLoaded)"
    )

    nav_retry_delay_ms: int = Field(
        default=1500,
        ge=0,
        le=30000,
        description="Pause between failed navigation attempts"
    )

    element_wait_timeout_ms: int = Field(
        default=20000,
        ge=1000,
        le=120000,
        description="How long the input element may take to become visible"
    )

    # Execution
    case_timeout: int = Field(
        default=120,
        ge=10,
        le=600,
        description="Overall budget for one test case in seconds"
    )

    max_parallel_cases: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Cases run concurrently by run_suite, each in its own browser"
    )

    policy_filter: Optional[str] = Field(
        default=None,
        pattern=r"^(affirmative|degraded|liveness)$",
        description="Only run built-in cases with this policy (python -m tanglishrunner)"
    )

    # Diagnostics
    save_screenshots: bool = Field(
        default=True,
        description="Save a screenshot to disk when a case fails"
    )

    screenshot_dir: Optional[Path] = Field(default=None)
    log_dir: Optional[Path] = Field(default=None)

    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="TANGLISHRUNNER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize configuration and fill in default paths."""
        super().__init__(**kwargs)

        if self.log_dir is None:
            self.log_dir = Path.cwd() / "logs"

        if self.screenshot_dir is None:
            self.screenshot_dir = Path.cwd() / "screenshots"

    def _create_directories(self):
        """Create output directories if they don't exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if self.save_screenshots:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)

    def log_summary(self, logger: Optional[logging.Logger] = None):
        """Log the settings that shape a run, one group per line."""
        logger = logger or logging.getLogger(__name__)
        logger.info(f"Target:     {self.target_url} ({self.input_selector})")
        logger.info(
            f"Browser:    {self.browser_type} headless={self.headless} slow_mo={self.slow_mo}ms "
            f"viewport={self.viewport_width}x{self.viewport_height}"
        )
        logger.info(
            f"Typing:     {self.inter_key_delay_ms}ms/key, {self.post_word_settle_ms}ms/word, "
            f"{self.final_settle_ms}ms final (liveness {self.liveness_key_delay_ms}ms/key, "
            f"{self.liveness_settle_ms}ms)"
        )
        logger.info(
            f"Navigation: {self.nav_retries} attempt(s) x {self.nav_timeout_ms}ms, "
            f"{self.nav_retry_delay_ms}ms between, element wait {self.element_wait_timeout_ms}ms"
        )
        logger.info(
            f"Execution:  {self.case_timeout}s per case, {self.max_parallel_cases} in parallel, "
            f"policy={self.policy_filter or 'all'}"
        )
        if self.save_screenshots:
            logger.info(f"Screenshots on failure: {self.screenshot_dir}")

    @property
    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for BrowserType.launch."""
        options: Dict[str, Any] = {'headless': self.headless, 'slow_mo': self.slow_mo}
        # Container-friendly flags; Firefox and WebKit reject Chromium switches
        if self.headless and self.browser_type == "chromium":
            options['args'] = ['--no-sandbox', '--disable-dev-shm-usage', '--disable-gpu']
        return options

    @property
    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for Browser.new_context."""
        return {'viewport': {'width': self.viewport_width, 'height': self.viewport_height}}

    def get_log_path(self, log_name: str = "tanglishrunner.log") -> Path:
        """Full path for a log file."""
        return self.log_dir / log_name

    def get_screenshot_path(self, filename: str) -> Path:
        """Full path for a screenshot file."""
        return self.screenshot_dir / filename


# Global configuration instance
_config: Optional[TanglishRunnerConfig] = None


def get_config() -> TanglishRunnerConfig:
    """
    Get the global configuration instance.

    Returns:
        TanglishRunnerConfig instance
    """
    global _config
    if _config is None:
        _config = TanglishRunnerConfig()
    return _config


def reload_config() -> TanglishRunnerConfig:
    """Re-read the environment into a new global configuration."""
    global _config
    _config = TanglishRunnerConfig()
    return _config


def set_config(config: TanglishRunnerConfig):
    """Replace the global configuration instance."""
    global _config
    _config = config


# Named overrides layered on top of env/.env/defaults
PROFILES: Dict[str, Dict[str, Any]] = {
    # Watch one case at a time in a visible browser
    "debug": {
        "headless": False,
        "slow_mo": 250,
        "max_parallel_cases": 1,
        "save_screenshots": True,
        "log_level": "DEBUG",
    },
    # Unattended runs against the live page
    "ci": {
        "headless": True,
        "slow_mo": 0,
        "save_screenshots": False,
    },
}

HEADED_SLOW_MO = 250


def get_profile_config(profile: str, **overrides) -> TanglishRunnerConfig:
    """
    Build a configuration from a named profile.

    Args:
        profile: Key of PROFILES
        **overrides: Field values applied on top of the profile

    Raises:
        ValueError: If the profile is unknown
    """
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile '{profile}' (expected one of {sorted(PROFILES)})")
    return TanglishRunnerConfig(**{**PROFILES[profile], **overrides})


def get_test_config(temp_dir: Optional[Path] = None) -> TanglishRunnerConfig:
    """
    Configuration for the pytest session.

    Loads .env into the process environment first so that both the settings
    and the TANGLISHRUNNER_LIVE gate see it. A headed browser without an
    explicit TANGLISHRUNNER_SLOW_MO is slowed down so a person can follow it.

    Args:
        temp_dir: Directory for logs/ and screenshots/ (cwd-based defaults if None)
    """
    load_dotenv(Path.cwd() / '.env')

    overrides: Dict[str, Any] = {'save_screenshots': True}
    if temp_dir is not None:
        overrides['log_dir'] = temp_dir / "logs"
        overrides['screenshot_dir'] = temp_dir / "screenshots"

    config = TanglishRunnerConfig(**overrides)
    if not config.headless and 'TANGLISHRUNNER_SLOW_MO' not in os.environ:
        config = config.model_copy(update={'slow_mo': HEADED_SLOW_MO})
    return config
