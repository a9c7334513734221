"""JSON Schemas for block-engine and ledger RPC result payloads."""

from .registry import SCHEMA_NAMES, SchemaRegistry, SchemaValidationError

__all__ = ["SCHEMA_NAMES", "SchemaRegistry", "SchemaValidationError"]
