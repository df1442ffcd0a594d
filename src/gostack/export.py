from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from .config import SCHEMA_VERSION
from .summary import ProfileSummary

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "summary.schema.json"


def build_payload(summary: ProfileSummary) -> dict[str, Any]:
    return {"schema_version": SCHEMA_VERSION, **summary.to_dict()}


def validate_summary(payload: dict[str, Any], *, schema_path: Path | None = None) -> None:
    """Raise `jsonschema.ValidationError` if `payload` does not match the summary schema."""
    schema_path = SCHEMA_PATH if schema_path is None else schema_path
    schema = json.loads(schema_path.read_text())
    Draft202012Validator(schema).validate(payload)


def write_summary(path: Path, payload: dict[str, Any]) -> None:
    validate_summary(payload)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n")
