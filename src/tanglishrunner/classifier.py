"""
Classification of converted text.

Three policies, chosen per case:

- affirmative: the output must contain Tamil script AND match at least one of
  the case's expected keyword patterns.
- degraded: the input is expected to defeat the converter. Any one of an
  explicit "invalid" marker, leftover Latin letters or flagged symbols, or no
  Tamil at all counts as correctly not converted. The service's failure
  behaviour is undocumented, so this only confirms it did not produce a
  clean conversion.
- liveness: the output is non-empty.
"""

import logging
import re
from typing import Union

from .errors import ConversionAssertionError
from .models import CasePolicy, ConversionResult, TestCase, Verdict
from .text_utils import contains_tamil_script, normalize, tamil_char_count

logger = logging.getLogger(__name__)

INVALID_MARKER = re.compile(r'invalid', re.IGNORECASE)
SOURCE_OR_SYMBOL = re.compile(r'[A-Za-z@₹!?]')


def classify_affirmative(case: TestCase, value: str) -> Verdict:
    has_tamil = contains_tamil_script(value)
    matched = [p.pattern for p in case.compiled_patterns() if p.search(value)]
    checks = {
        'has_tamil': has_tamil,
        'matches_expected': bool(matched),
    }
    passed = has_tamil and bool(matched)

    if passed:
        reason = f"matched {matched}"
    elif not has_tamil:
        reason = "no Tamil characters in output"
    else:
        reason = "no expected pattern matched"

    return Verdict(
        case_id=case.id,
        policy=CasePolicy.AFFIRMATIVE,
        passed=passed,
        checks=checks,
        expected=list(case.must_contain or []),
        actual=value,
        reason=reason
    )


def classify_degraded(case: TestCase, value: str) -> Verdict:
    checks = {
        'has_invalid_marker': bool(INVALID_MARKER.search(value)),
        'has_source_or_symbols': bool(SOURCE_OR_SYMBOL.search(value)),
        'has_no_tamil': not contains_tamil_script(value),
    }
    passed = any(checks.values())

    if passed:
        reason = "output is not a clean conversion (" + ", ".join(
            name for name, hit in checks.items() if hit
        ) + ")"
    else:
        reason = f"output looks like a clean Tamil conversion ({tamil_char_count(value)} Tamil characters)"

    return Verdict(
        case_id=case.id,
        policy=CasePolicy.DEGRADED,
        passed=passed,
        checks=checks,
        actual=value,
        reason=reason
    )


def classify_liveness(case: TestCase, value: str) -> Verdict:
    non_empty = len(value) > 0
    return Verdict(
        case_id=case.id,
        policy=CasePolicy.LIVENESS,
        passed=non_empty,
        checks={'non_empty': non_empty},
        actual=value,
        reason=f"{len(value)} character(s) visible" if non_empty else "input is empty after typing"
    )


_POLICIES = {
    CasePolicy.AFFIRMATIVE: classify_affirmative,
    CasePolicy.DEGRADED: classify_degraded,
    CasePolicy.LIVENESS: classify_liveness,
}


def classify(case: TestCase, result: Union[ConversionResult, str]) -> Verdict:
    """
    Classify a conversion result under the case's policy.

    Args:
        case: The test case
        result: ConversionResult (its normalized value is used) or raw text,
                which is normalized first

    Returns:
        Verdict
    """
    value = result.normalized_value if isinstance(result, ConversionResult) else normalize(result)
    verdict = _POLICIES[case.policy](case, value)

    level = logging.INFO if verdict.passed else logging.WARNING
    logger.log(level, verdict.describe())
    return verdict


def assert_verdict(verdict: Verdict) -> Verdict:
    """
    Raise if the verdict failed.

    Raises:
        ConversionAssertionError: With the expected patterns and actual text
    """
    if not verdict.passed:
        raise ConversionAssertionError(verdict)
    return verdict
