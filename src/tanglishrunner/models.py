"""
Pydantic models for test cases, conversion results and verdicts.

Test cases are declarative data loaded from case tables (see case_tables.py);
adding a scenario means adding a table row, not new control flow.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .text_utils import normalize


CASE_ID_PATTERN = r'^[A-Za-z]+_[A-Za-z]+_\d{4}$'


class CasePolicy(str, Enum):
    """How the extracted text of a case is classified."""
    AFFIRMATIVE = "affirmative"
    DEGRADED = "degraded"
    LIVENESS = "liveness"


class TestCase(BaseModel):
    """A single scenario: romanized input plus its expectation rules."""
    __test__ = False  # not a pytest class

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        pattern=CASE_ID_PATTERN,
        description="<Category>_<Type>_<4-digit-seq>, e.g. Pos_Fun_0001"
    )
    name: str = Field(..., description="Human-readable description")
    input: str = Field(..., description="Romanized source text to type")
    policy: CasePolicy = Field(..., description="Classification policy")
    must_contain: Optional[List[str]] = Field(
        default=None,
        description="Regex sources; any one must match (affirmative cases)"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not empty."""
        if not v or not v.strip():
            raise ValueError("Case name cannot be empty")
        return v.strip()

    @field_validator('must_contain')
    @classmethod
    def validate_patterns(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Ensure every pattern compiles."""
        if v is None:
            return v
        for source in v:
            try:
                re.compile(source)
            except re.error as e:
                raise ValueError(f"Invalid pattern {source!r}: {e}")
        return v

    @model_validator(mode='after')
    def validate_policy_rules(self):
        """Affirmative cases need at least one expected pattern."""
        if self.policy == CasePolicy.AFFIRMATIVE and not self.must_contain:
            raise ValueError(
                f"Affirmative case {self.id} must define at least one must_contain pattern"
            )
        return self

    @property
    def category(self) -> str:
        return self.id.split('_')[0]

    @property
    def case_type(self) -> str:
        return self.id.split('_')[1]

    @property
    def sequence(self) -> int:
        return int(self.id.split('_')[2])

    @property
    def title(self) -> str:
        """Display title, '<id> - <name>'."""
        return f"{self.id} - {self.name}"

    def compiled_patterns(self) -> List[re.Pattern]:
        return [re.compile(source) for source in (self.must_contain or [])]


class CaseTable(BaseModel):
    """A named group of cases sharing one classification policy."""
    table_id: str = Field(..., pattern=r'^[a-z0-9-]+$')
    description: str = Field(default="")
    policy: CasePolicy
    cases: List[TestCase] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def inherit_policy(cls, data: Any) -> Any:
        """Rows take the table's policy unless they state their own."""
        if isinstance(data, dict) and 'policy' in data:
            rows = []
            for row in data.get('cases') or []:
                if isinstance(row, dict) and 'policy' not in row:
                    row = {**row, 'policy': data['policy']}
                rows.append(row)
            data = {**data, 'cases': rows}
        return data

    @model_validator(mode='after')
    def validate_unique_ids(self):
        """Ensure case ids are unique within the table."""
        seen = set()
        duplicates = []
        for case in self.cases:
            if case.id in seen:
                duplicates.append(case.id)
            seen.add(case.id)
        if duplicates:
            raise ValueError(f"Duplicate case ids in table {self.table_id}: {duplicates}")
        return self


class ConversionResult(BaseModel):
    """Text read back from the input element once typing settled."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    raw_value: str = Field(default="", description="Value as read from the element")
    normalized_value: str = Field(default="", description="Whitespace-collapsed, trimmed value")
    element: Optional[Any] = Field(
        default=None,
        exclude=True,
        repr=False,
        description="Playwright Locator of the input element"
    )

    @model_validator(mode='before')
    @classmethod
    def derive_normalized(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get('normalized_value') is None:
            data = {**data, 'normalized_value': normalize(data.get('raw_value'))}
        return data

    @model_validator(mode='after')
    def validate_normalized(self):
        """normalized_value must be normalize(raw_value)."""
        if self.normalized_value != normalize(self.raw_value):
            raise ValueError(
                f"normalized_value {self.normalized_value!r} does not match "
                f"normalize(raw_value) for {self.raw_value!r}"
            )
        return self

    @classmethod
    def from_raw(cls, raw_value: Optional[str], element: Any = None) -> 'ConversionResult':
        return cls(raw_value=raw_value or "", element=element)


class Verdict(BaseModel):
    """Outcome of classifying one conversion result."""
    case_id: str
    policy: CasePolicy
    passed: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    expected: List[str] = Field(default_factory=list)
    actual: str = ""
    reason: str = ""

    def describe(self) -> str:
        """One-line diagnostic for assertion messages and logs."""
        status = "PASS" if self.passed else "FAIL"
        checks = ", ".join(f"{name}={value}" for name, value in self.checks.items())
        message = f"[{status}] {self.case_id} ({self.policy.value}): {self.reason}"
        if self.expected:
            message += f" | expected any of {self.expected}"
        message += f" | actual {self.actual!r}"
        if checks:
            message += f" | checks: {checks}"
        return message


class CaseOutcome(BaseModel):
    """Result of running one case end to end."""
    success: bool
    case_id: str
    verdict: Optional[Verdict] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    screenshot: Optional[str] = None
    execution_time_ms: int = 0


class SuiteReport(BaseModel):
    """Aggregate of a suite run."""
    outcomes: List[CaseOutcome] = Field(default_factory=list)
    execution_time_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def failures(self) -> List[CaseOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]
