"""
TanglishRunner - browser-driven test harness for a Thanglish -> Tamil
transliteration page.

Navigator loads the page, Typist types word by word and reads the converted
text, and the classifier decides pass/fail from declarative case tables.
"""

__version__ = "1.0.0"

from .config import TanglishRunnerConfig, get_config
from .models import CasePolicy, ConversionResult, TestCase, Verdict
from .case_tables import all_cases, cases_for_policy, get_case
from .classifier import assert_verdict, classify
from .navigator import Navigator
from .typist import Typist
from .runner import run_case, run_suite

__all__ = [
    "TanglishRunnerConfig",
    "get_config",
    "CasePolicy",
    "ConversionResult",
    "TestCase",
    "Verdict",
    "all_cases",
    "cases_for_policy",
    "get_case",
    "assert_verdict",
    "classify",
    "Navigator",
    "Typist",
    "run_case",
    "run_suite",
]
