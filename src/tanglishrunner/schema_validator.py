"""
Schema-first validation for case tables.

Case tables are plain JSON so new scenarios are table rows, not code. Each
table is checked against the case-table JSON Schema (draft-07) before it is
parsed into models, so authors get the failing row and the rule it broke
rather than a bare pydantic traceback.
"""

from pathlib import Path
from typing import Dict, Any, List, Optional
import json
import logging

from jsonschema import Draft7Validator, ValidationError

logger = logging.getLogger(__name__)

CASES_DIR = Path(__file__).parent / "cases"
SCHEMA_FILENAME = "case-table-schema.json"


class SchemaValidator:
    """Validates raw case-table data against the case-table schema."""

    def __init__(self, schema_path: Optional[Path] = None):
        """
        Initialize schema validator.

        Args:
            schema_path: Path to the JSON Schema (defaults to the bundled one)
        """
        self.schema_path = schema_path or CASES_DIR / SCHEMA_FILENAME
        self._schema: Optional[Dict[str, Any]] = None

    def load_schema(self) -> Dict[str, Any]:
        """
        Load the case-table schema.

        Returns:
            JSON Schema (draft-07) as dict

        Raises:
            FileNotFoundError: If the schema file doesn't exist
            json.JSONDecodeError: If the schema file is invalid JSON
        """
        if self._schema is not None:
            return self._schema

        if not self.schema_path.exists():
            logger.error(f"❌ Schema not found: {self.schema_path}")
            raise FileNotFoundError(f"Case-table schema not found at: {self.schema_path}")

        with open(self.schema_path, 'r', encoding='utf-8') as f:
            self._schema = json.load(f)

        Draft7Validator.check_schema(self._schema)
        logger.debug(f"Schema loaded: {self.schema_path}")
        return self._schema

    def validate_table_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate case-table data against the schema.

        Args:
            data: Parsed JSON of one case table

        Returns:
            {
                'valid': True/False,
                'errors': [{path, reason, validator}] if invalid
            }
        """
        validator = Draft7Validator(self.load_schema())
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

        if not errors:
            return {
                'valid': True,
                'message': 'Case table conforms to schema'
            }

        details = [self._describe_error(error, data) for error in errors]
        for detail in details:
            logger.error(f"❌ Case table invalid at {detail['path']}: {detail['reason']}")

        return {
            'valid': False,
            'error': details[0]['reason'],
            'errors': details
        }

    def _describe_error(self, error: ValidationError, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Turn a jsonschema error into a readable detail dict.

        Rows are identified by their case id when one is available, so the
        message points at `cases[Neg_Fun_0004].input` instead of `cases/3/input`.
        """
        path = list(error.path)
        path_text = "/".join(str(part) for part in path) or "<root>"

        if len(path) >= 2 and path[0] == 'cases' and isinstance(path[1], int):
            rows = data.get('cases') or []
            row = rows[path[1]] if path[1] < len(rows) else None
            if isinstance(row, dict) and row.get('id'):
                rest = "/".join(str(part) for part in path[2:])
                path_text = f"cases[{row['id']}]" + (f"/{rest}" if rest else "")

        if error.validator == 'pattern':
            reason = f"Value {error.instance!r} must match pattern {error.validator_value}"
        elif error.validator == 'enum':
            reason = f"Value {error.instance!r} must be one of {error.validator_value}"
        elif error.validator == 'required':
            reason = error.message
        elif error.validator == 'additionalProperties':
            reason = f"Unexpected field: {error.message}"
        else:
            reason = error.message

        return {
            'path': path_text,
            'reason': reason,
            'validator': error.validator
        }


def list_table_files(cases_dir: Path = CASES_DIR) -> List[Path]:
    """Case-table JSON files in a directory, schema excluded, sorted by name."""
    return sorted(
        path for path in cases_dir.glob("*.json")
        if path.name != SCHEMA_FILENAME
    )
