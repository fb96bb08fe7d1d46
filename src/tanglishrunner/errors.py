"""
Error taxonomy for the harness.

Only navigation failures are retried (by the Navigator). Everything here is
fatal for the test case that raised it.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Verdict


class TanglishRunnerError(Exception):
    """Base class for harness errors."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        base = f"{type(self).__name__}: {self.message}"
        if self.cause:
            return f"{base} (caused by {self.cause!r})"
        return base


class TransientNavigationError(TanglishRunnerError):
    """The page never reached DOMContentLoaded within the retry ceiling."""

    def __init__(self, url: str, attempts: int, *, cause: Optional[Exception] = None):
        super().__init__(
            f"Navigation to {url} failed after {attempts} attempt(s)",
            cause=cause
        )
        self.url = url
        self.attempts = attempts


class ElementNotFoundError(TanglishRunnerError):
    """The input control never became visible."""

    def __init__(self, selector: str, timeout_ms: int, *, cause: Optional[Exception] = None):
        super().__init__(
            f"Element {selector} not visible within {timeout_ms}ms",
            cause=cause
        )
        self.selector = selector
        self.timeout_ms = timeout_ms


class CaseTableError(TanglishRunnerError):
    """A case table failed schema or model validation."""


class ConversionAssertionError(AssertionError):
    """Extracted text did not satisfy the case's classification policy."""

    def __init__(self, verdict: "Verdict"):
        super().__init__(verdict.describe())
        self.verdict = verdict
