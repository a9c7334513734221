from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import FormatChecker

# RPC method -> schema describing its result payload
SCHEMA_NAMES = {
    "getTipAccounts": "tip_accounts.schema.json",
    "getBundleStatuses": "bundle_statuses.schema.json",
    "getSignatureStatuses": "signature_statuses.schema.json",
    "getLatestBlockhash": "latest_blockhash.schema.json",
}

SCHEMA_ROOT = Path(__file__).resolve().parent


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return f"{base} ({'; '.join(self.errors[:3])})"


@dataclass(frozen=True)
class SchemaRegistry:
    schema_root: Path

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return _default_registry()

    def schema_path(self, schema_filename: str) -> Path:
        return self.schema_root / schema_filename

    def load_schema(self, schema_filename: str) -> dict[str, Any]:
        path = self.schema_path(schema_filename)
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def validator_for(self, schema_filename: str) -> jsonschema.Validator:
        return _validator(self.schema_root, schema_filename)

    def validate_instance(self, instance: Any, schema_filename: str) -> None:
        validator = self.validator_for(schema_filename)
        errors = sorted(validator.iter_errors(instance), key=lambda e: [str(part) for part in e.path])
        if errors:
            formatted = [self._format_error(err) for err in errors]
            raise SchemaValidationError(
                f"Schema validation failed for {schema_filename}.",
                errors=formatted,
            )

    def validate_result(self, method: str, result: Any) -> None:
        """Validate the result payload of ``method`` against its schema."""
        self.validate_instance(result, SCHEMA_NAMES[method])

    @staticmethod
    def _format_error(error: jsonschema.ValidationError) -> str:
        location = "/".join(str(part) for part in error.path) or "<root>"
        return f"{location}: {error.message}"


@lru_cache(maxsize=1)
def _default_registry() -> SchemaRegistry:
    if not SCHEMA_ROOT.is_dir():
        raise FileNotFoundError(f"Unable to locate schema directory: {SCHEMA_ROOT}")
    return SchemaRegistry(schema_root=SCHEMA_ROOT)


@lru_cache(maxsize=16)
def _validator(schema_root: Path, schema_filename: str) -> jsonschema.Validator:
    schema = SchemaRegistry(schema_root).load_schema(schema_filename)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=FormatChecker())
