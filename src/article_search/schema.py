"""JSON Schema check for article records before they reach the cache file."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

RECORD_SCHEMA_FILE = Path(__file__).resolve().parent / "schemas" / "article_entity.schema.json"


@lru_cache(maxsize=1)
def record_schema() -> Dict[str, Any]:
    return json.loads(RECORD_SCHEMA_FILE.read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def _record_validator() -> Draft202012Validator:
    return Draft202012Validator(record_schema())


def validate_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Check every cache record against the bundled ArticleEntity schema.

    Raises ValueError for the first bad record, listing each offending field
    (or ``record`` for problems with the object itself, such as unknown keys).
    """
    validator = _record_validator()
    for index, record in enumerate(records):
        problems = [
            f"{'/'.join(str(part) for part in error.absolute_path) or 'record'}: {error.message}"
            for error in validator.iter_errors(record)
        ]
        if problems:
            raise ValueError(f"Record {index} failed schema validation: {'; '.join(problems)}")
    return records
