"""Per-method envelope schema validation backed by jsonschema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

from jsonschema import Draft202012Validator

from nanorpc.utils.exceptions import DuplicateMethodError

__all__ = [
    "SchemaIssue",
    "MethodValidator",
    "SchemaValidator",
    "JsonSchemaMethodValidator",
    "JsonSchemaValidators",
    "format_schema_issues",
]


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """One diagnostic produced by a failed validation."""

    keyword: str
    path: str
    message: str


class MethodValidator(Protocol):
    """Validator bound to a single method."""

    def validate(self, envelope: Mapping[str, Any]) -> list[SchemaIssue]:
        """Return the issues found; an empty list means the envelope is acceptable."""


class SchemaValidator(Protocol):
    """Lookup of validators by method name."""

    def get_validator(self, method: str) -> MethodValidator | None:
        """Return the validator for ``method`` or None when it has no schema."""


def _instance_path(parts: Iterable[Any]) -> str:
    # JSON pointer, "" for the root
    return "".join(f"/{part}" for part in parts)


class JsonSchemaMethodValidator:
    """Compiled Draft 2020-12 schema for one method."""

    def __init__(self, schema: Mapping[str, Any]):
        Draft202012Validator.check_schema(schema)
        self._validator = Draft202012Validator(schema)

    def validate(self, envelope: Mapping[str, Any]) -> list[SchemaIssue]:
        errors = sorted(self._validator.iter_errors(envelope), key=lambda e: [str(p) for p in e.absolute_path])
        return [
            SchemaIssue(
                keyword=str(error.validator),
                path=_instance_path(error.absolute_path),
                message=error.message,
            )
            for error in errors
        ]


class JsonSchemaValidators:
    """Registry of per-method schemas; the default SchemaValidator."""

    def __init__(self):
        self._validators: dict[str, MethodValidator] = {}

    def add_schema(self, method: str, schema: Mapping[str, Any]) -> JsonSchemaValidators:
        """Compile and register a schema for ``method``. Raises jsonschema.SchemaError on a bad schema."""
        if method in self._validators:
            raise DuplicateMethodError(method)
        self._validators[method] = JsonSchemaMethodValidator(schema)
        return self

    def add_validator(self, method: str, validator: MethodValidator) -> JsonSchemaValidators:
        """Register a custom validator object for ``method``."""
        if method in self._validators:
            raise DuplicateMethodError(method)
        self._validators[method] = validator
        return self

    def get_validator(self, method: str) -> MethodValidator | None:
        return self._validators.get(method)

    def __contains__(self, method: object) -> bool:
        return method in self._validators


def format_schema_issues(issues: Iterable[SchemaIssue]) -> str:
    """Join diagnostics into the multi-line 406 message."""
    return "\n".join(f"{issue.keyword}: {issue.path}, {issue.message}" for issue in issues)
