"""
Logging for the TanglishRunner harness.

run_suite drives several cases at once, so every record carries the id of the
case whose task emitted it (``%(case_id)s``). run_case binds the id with
``case_context``; the value lives in a ContextVar, which asyncio copies into
each task, so concurrent cases never see each other's id. Records logged
outside a case show ``-``.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_CASE = "-"

_CURRENT_CASE: ContextVar[str] = ContextVar("tanglishrunner_current_case", default=NO_CASE)

_RESET = '\033[0m'
_LEVEL_STYLES = {
    logging.DEBUG: '\033[2m',
    logging.INFO: '\033[92m',
    logging.WARNING: '\033[93m',
    logging.ERROR: '\033[91m',
    logging.CRITICAL: '\033[1;91m',
}
_CASE_STYLE = '\033[96m'

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | [%(case_id)s] %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | [%(case_id)s] %(name)s:%(lineno)d | %(message)s"


def current_case() -> str:
    """Id of the case bound to the running task, or NO_CASE."""
    return _CURRENT_CASE.get()


@contextmanager
def case_context(case_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with case_id."""
    token = _CURRENT_CASE.set(case_id)
    try:
        yield
    finally:
        _CURRENT_CASE.reset(token)


class CaseContextFilter(logging.Filter):
    """Copies the bound case id onto each record as ``case_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'case_id'):
            record.case_id = current_case()
        return True


class ColoredFormatter(logging.Formatter):
    """Colors the level name and case id of console lines."""

    def format(self, record):
        # Copy so the file handler still gets plain text
        record = logging.makeLogRecord(record.__dict__)
        style = _LEVEL_STYLES.get(record.levelno)
        if style:
            record.levelname = f"{style}{record.levelname:8s}{_RESET}"
        if record.case_id != NO_CASE:
            record.case_id = f"{_CASE_STYLE}{record.case_id}{_RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_colors: bool = True
) -> None:
    """
    Configure root logging for a harness run.

    Args:
        level: Root level name (DEBUG, INFO, ...)
        log_file: Also write UTF-8 records, with line numbers, to this file
        use_colors: Color console output when stdout is a terminal
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    case_filter = CaseContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(case_filter)
    if use_colors and sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.addFilter(case_filter)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)


def log_browser_action(
    action: str,
    details: str,
    success: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log one browser step as a ✓/✗ line (ERROR level on failure)."""
    logger = logger or logging.getLogger(__name__)
    status = "✓" if success else "✗"
    logger.log(logging.INFO if success else logging.ERROR, f"{status} {action:10s} | {details}")
