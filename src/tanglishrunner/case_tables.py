"""
Loading of the declarative case tables.

Tables live as JSON under the package's cases/ directory. Each is validated
against the case-table schema, then parsed into CaseTable/TestCase models.
Loaded tables are read-only for the lifetime of the process.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from .errors import CaseTableError
from .models import CasePolicy, CaseTable, TestCase
from .schema_validator import CASES_DIR, SchemaValidator, list_table_files

logger = logging.getLogger(__name__)


def load_case_table(path: Path, validator: Optional[SchemaValidator] = None) -> CaseTable:
    """
    Load and validate one case table.

    Args:
        path: Path to the table's JSON file
        validator: SchemaValidator to use (bundled schema if None)

    Returns:
        CaseTable

    Raises:
        CaseTableError: If the file is missing or unreadable, is not UTF-8
                        JSON, breaks the schema, or fails model validation
    """
    validator = validator or SchemaValidator()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise CaseTableError(f"Case table {path} could not be read", cause=e)
    except UnicodeDecodeError as e:
        raise CaseTableError(f"Case table {path.name} is not UTF-8 text", cause=e)
    except json.JSONDecodeError as e:
        raise CaseTableError(f"Case table {path.name} is not valid JSON", cause=e)

    result = validator.validate_table_data(data)
    if not result['valid']:
        problems = "; ".join(f"{d['path']}: {d['reason']}" for d in result['errors'])
        raise CaseTableError(f"Case table {path.name} failed schema validation: {problems}")

    try:
        table = CaseTable.model_validate(data)
    except ValidationError as e:
        raise CaseTableError(f"Case table {path.name} failed model validation: {e}", cause=e)

    logger.debug(f"Loaded case table {table.table_id} ({len(table.cases)} cases)")
    return table


def load_tables(cases_dir: Union[str, Path]) -> Tuple[CaseTable, ...]:
    """
    Load every case table in a directory.

    Raises:
        CaseTableError: If any table is invalid or a case id appears in more
                        than one table
    """
    cases_dir = Path(cases_dir)
    validator = SchemaValidator()
    tables = tuple(load_case_table(path, validator) for path in list_table_files(cases_dir))

    owners: Dict[str, str] = {}
    for table in tables:
        for case in table.cases:
            if case.id in owners:
                raise CaseTableError(
                    f"Case id {case.id} defined in both {owners[case.id]} and {table.table_id}"
                )
            owners[case.id] = table.table_id

    logger.info(f"Loaded {len(tables)} case table(s), {len(owners)} case(s) from {cases_dir}")
    return tables


@lru_cache(maxsize=1)
def load_builtin_tables() -> Tuple[CaseTable, ...]:
    """The tables shipped with the package (cached)."""
    return load_tables(CASES_DIR)


def all_cases() -> List[TestCase]:
    """Every built-in case, in table order."""
    return [case for table in load_builtin_tables() for case in table.cases]


def cases_for_policy(policy: Union[CasePolicy, str]) -> List[TestCase]:
    """Built-in cases classified with the given policy."""
    policy = CasePolicy(policy)
    return [case for case in all_cases() if case.policy == policy]


def get_case(case_id: str) -> TestCase:
    """
    Look up a built-in case by id.

    Raises:
        KeyError: If no case has that id
    """
    for case in all_cases():
        if case.id == case_id:
            return case
    raise KeyError(f"Unknown case id: {case_id}")
