"""
Case execution: one browser per case, many cases concurrently.

run_case never raises for an expected failure (navigation, missing element,
failed classification, timeout). It returns a CaseOutcome describing what
happened so run_suite can report every case.
"""

import asyncio
import logging
import time
from typing import Callable, Iterable, Optional

from playwright.async_api import Page

from .case_tables import all_cases
from .classifier import classify
from .config import TanglishRunnerConfig, get_config
from .logging_config import case_context, setup_logging
from .models import CaseOutcome, CasePolicy, SuiteReport, TestCase, Verdict
from .playwright_client import PlaywrightClient
from .typist import Typist

logger = logging.getLogger(__name__)


async def drive_case(case: TestCase, page: Page, config: Optional[TanglishRunnerConfig] = None) -> Verdict:
    """
    Type the case's input on an open page and classify the result.

    Liveness cases use the single-run typing of Typist.type_once; every other
    policy uses the word-by-word protocol.

    Raises:
        TransientNavigationError, ElementNotFoundError
    """
    config = config or get_config()
    typist = Typist(page, config)

    if case.policy == CasePolicy.LIVENESS:
        result = await typist.type_once(config.target_url, case.input)
    else:
        result = await typist.type_and_extract(config.target_url, case.input)

    return classify(case, result)


async def run_case(
    case: TestCase,
    config: Optional[TanglishRunnerConfig] = None,
    client_factory: Callable[[TanglishRunnerConfig], PlaywrightClient] = PlaywrightClient
) -> CaseOutcome:
    """
    Run one case in its own browser session.

    Args:
        case: Case to run
        config: Harness configuration (global if None)
        client_factory: Builds the browser client for this case

    Returns:
        CaseOutcome; success is True only when the verdict passed
    """
    config = config or get_config()
    with case_context(case.id):
        return await _execute_case(case, config, client_factory)


async def _execute_case(
    case: TestCase,
    config: TanglishRunnerConfig,
    client_factory: Callable[[TanglishRunnerConfig], PlaywrightClient]
) -> CaseOutcome:
    start_time = time.time()
    client = client_factory(config)

    logger.info(f"=> {case.title}")

    async def _run() -> Verdict:
        page = await client.launch()
        return await drive_case(case, page, config)

    try:
        verdict = await asyncio.wait_for(_run(), timeout=config.case_timeout)

        screenshot = None
        if not verdict.passed:
            screenshot = await client.take_screenshot(case.id)

        return CaseOutcome(
            success=verdict.passed,
            case_id=case.id,
            verdict=verdict,
            screenshot=str(screenshot) if screenshot else None,
            execution_time_ms=int((time.time() - start_time) * 1000)
        )

    except asyncio.TimeoutError:
        logger.error(f"✗ {case.id} exceeded the {config.case_timeout}s case budget")
        screenshot = await client.take_screenshot(case.id)
        return CaseOutcome(
            success=False,
            case_id=case.id,
            error=f"Case exceeded {config.case_timeout}s",
            error_type="TimeoutError",
            screenshot=str(screenshot) if screenshot else None,
            execution_time_ms=int((time.time() - start_time) * 1000)
        )

    except Exception as e:
        logger.error(f"✗ {case.id} failed: {type(e).__name__}: {e}")
        screenshot = await client.take_screenshot(case.id)
        return CaseOutcome(
            success=False,
            case_id=case.id,
            error=str(e),
            error_type=type(e).__name__,
            screenshot=str(screenshot) if screenshot else None,
            execution_time_ms=int((time.time() - start_time) * 1000)
        )

    finally:
        await client.close()


async def run_suite(
    cases: Iterable[TestCase],
    config: Optional[TanglishRunnerConfig] = None,
    max_parallel: Optional[int] = None,
    client_factory: Callable[[TanglishRunnerConfig], PlaywrightClient] = PlaywrightClient
) -> SuiteReport:
    """
    Run cases concurrently, each in its own browser.

    Args:
        cases: Cases to run
        config: Harness configuration (global if None)
        max_parallel: Concurrency cap (config.max_parallel_cases if None)
        client_factory: Builds the browser client for each case

    Returns:
        SuiteReport with outcomes in input order
    """
    config = config or get_config()
    cases = list(cases)
    semaphore = asyncio.Semaphore(max_parallel or config.max_parallel_cases)
    start_time = time.time()

    async def _bounded(case: TestCase) -> CaseOutcome:
        async with semaphore:
            return await run_case(case, config, client_factory)

    outcomes = await asyncio.gather(*(_bounded(case) for case in cases))

    report = SuiteReport(
        outcomes=list(outcomes),
        execution_time_ms=int((time.time() - start_time) * 1000)
    )
    log_report(report)
    return report


def log_report(report: SuiteReport) -> None:
    logger.info("=" * 70)
    logger.info(f"Suite finished: {report.passed}/{report.total} passed in {report.execution_time_ms}ms")
    for outcome in report.failures():
        if outcome.verdict is not None:
            logger.error(f"   {outcome.verdict.describe()}")
        else:
            logger.error(f"   [ERROR] {outcome.case_id}: {outcome.error_type}: {outcome.error}")
    logger.info("=" * 70)


def select_cases(config: TanglishRunnerConfig) -> list:
    """Built-in cases, narrowed to config.policy_filter when set."""
    cases = all_cases()
    if config.policy_filter:
        policy = CasePolicy(config.policy_filter)
        cases = [case for case in cases if case.policy == policy]
    return cases


def main() -> int:
    """Run every built-in case and return a process exit code."""
    config = get_config()
    config._create_directories()
    setup_logging(level=config.log_level, log_file=str(config.get_log_path()))
    config.log_summary()

    report = asyncio.run(run_suite(select_cases(config), config))
    return 0 if report.all_passed else 1
