"""
Validation engine for campaignflow.

Compiles schema nodes into reusable validators. A validator reports every
violated keyword as a ``ValidationIssue``; it never raises for bad data.

Keyword checks run on ``jsonschema``'s Draft 7 validator, extended so that
``pattern`` uses ``regress`` (the ECMA-262 dialect the canonical schema is
authored against, with search semantics), ``required`` and
``additionalProperties`` report one error per field, and ``number`` only
accepts finite values. Descent into properties and items stays here so
hidden fields can be pruned.
"""

import math
import re
from collections.abc import Callable, Iterator
from datetime import date, datetime
from functools import lru_cache
from typing import Any

import regress
from jsonschema import Draft7Validator, FormatChecker, ValidationError, validators

from .models import (
    ArrayNode,
    EnumNode,
    ObjectNode,
    SchemaNode,
    Severity,
    ValidationIssue,
)
from .paths import MISSING, format_path, parse_path

Prune = Callable[[str], bool]

FORMAT_PATTERNS = {
    "date": re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII),
    "date-time": re.compile(
        r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?([Zz]|[+-]\d{2}:?\d{2})?", re.ASCII
    ),
    "email": re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", re.ASCII),
    "uri": re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*:[^\s]+", re.ASCII),
    "uuid": re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.ASCII | re.IGNORECASE),
}

# Order in which keyword errors of one value are reported.
KEYWORD_ORDER = (
    "type",
    "enum",
    "minLength",
    "maxLength",
    "pattern",
    "format",
    "minimum",
    "exclusiveMinimum",
    "maximum",
    "exclusiveMaximum",
    "minItems",
    "maxItems",
    "uniqueItems",
    "required",
    "additionalProperties",
)


# ============================================================================
# Value helpers
# ============================================================================


def json_type(value: Any) -> str:
    """JSON type name of a Python value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number" if math.isfinite(value) else "non-finite number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def matches_type(value: Any, type_name: str) -> bool:
    """Check a value against one JSON Schema type name."""
    return CampaignValidator.TYPE_CHECKER.is_type(value, type_name)


def json_equal(left: Any, right: Any) -> bool:
    """Equality with JSON semantics: booleans are never numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    return left == right


def format_limit(limit: int | float) -> str:
    """Render a numeric bound without a trailing ``.0``."""
    if isinstance(limit, float) and limit.is_integer():
        return str(int(limit))
    return str(limit)


def parse_datetime(value: Any) -> datetime | None:
    """Parse a whole date or date-time string; None when it is not one."""
    if not isinstance(value, str) or not value or value != value.strip():
        return None
    text = value
    if text[-1] in ("Z", "z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def field_label(data_path: str, node: SchemaNode) -> str:
    """Name used for a field in messages."""
    parts = parse_path(data_path) if data_path else []
    for part in reversed(parts):
        if isinstance(part, str):
            return part
    return node.name or "value"


# ============================================================================
# Formats
# ============================================================================

format_checker = FormatChecker(formats=())


def _full_match(format_name: str, instance: str) -> bool:
    return FORMAT_PATTERNS[format_name].fullmatch(instance) is not None


@format_checker.checks("date", raises=ValueError)
def is_date(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    return _full_match("date", instance) and date.fromisoformat(instance) is not None


@format_checker.checks("date-time")
def is_datetime(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    return _full_match("date-time", instance) and parse_datetime(instance) is not None


@format_checker.checks("email")
def is_email(instance: Any) -> bool:
    return not isinstance(instance, str) or _full_match("email", instance)


@format_checker.checks("uri")
def is_uri(instance: Any) -> bool:
    return not isinstance(instance, str) or _full_match("uri", instance)


@format_checker.checks("uuid")
def is_uuid(instance: Any) -> bool:
    return not isinstance(instance, str) or _full_match("uuid", instance)


def check_format(format_name: str, value: str) -> bool:
    """Validate supported formats; unknown formats always pass."""
    return format_checker.conforms(value, format_name)


# ============================================================================
# Draft 7 keyword overrides
# ============================================================================


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> regress.Regex:
    return regress.Regex(pattern)


def _pattern(validator, pattern: str, instance: Any, schema: dict) -> Iterator[ValidationError]:
    if validator.is_type(instance, "string") and compile_pattern(pattern).find(instance) is None:
        yield ValidationError(f"{instance!r} does not match {pattern!r}")


def _required(validator, required: list[str], instance: Any, schema: dict) -> Iterator[ValidationError]:
    if not validator.is_type(instance, "object"):
        return
    for name in required:
        if name not in instance:
            yield ValidationError(f"{name!r} is a required property", path=(name,))


def _additional_properties(validator, allowed: Any, instance: Any, schema: dict) -> Iterator[ValidationError]:
    if allowed is not False or not validator.is_type(instance, "object"):
        return
    declared = schema.get("properties", {})
    for name in instance:
        if name not in declared:
            yield ValidationError(f"Additional property {name!r} is not allowed", path=(name,))


def _is_finite_number(checker, instance: Any) -> bool:
    return Draft7Validator.TYPE_CHECKER.is_type(instance, "number") and math.isfinite(instance)


CampaignValidator = validators.extend(
    Draft7Validator,
    validators={
        "pattern": _pattern,
        "required": _required,
        "additionalProperties": _additional_properties,
    },
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("number", _is_finite_number),
)


def keyword_schema(node: SchemaNode) -> dict[str, Any]:
    """
    Schema holding only the keywords a node asserts on its own value.

    Declared properties are listed as ``true`` so ``additionalProperties``
    can tell them apart; their values are checked by child validators.
    """
    schema: dict[str, Any] = {}
    if node.types:
        schema["type"] = list(node.types)
    schema.update(node.constraints())
    if isinstance(node, ObjectNode) and not node.additional_properties:
        schema["properties"] = {name: True for name in node.properties}
    return schema


# ============================================================================
# Validators
# ============================================================================


class Validator:
    """
    Validator compiled from one schema node.

    Child validators are compiled together with the parent, so running a
    validator performs no schema lookups.
    """

    def __init__(self, node: SchemaNode, children: dict[str, "Validator"] | None = None):
        self.node = node
        self.children = children or {}
        self.schema = keyword_schema(node)
        self._checker = CampaignValidator(self.schema, format_checker=format_checker)

    def run(
        self,
        value: Any,
        data_path: str = "",
        *,
        recursive: bool = True,
        prune: Prune | None = None,
    ) -> list[ValidationIssue]:
        """
        Validate ``value`` found at ``data_path``.

        Args:
            value: Value to check; ``MISSING`` means absent and always passes
            data_path: Concrete data path of the value, used in issues
            recursive: Descend into array elements and object properties
            prune: Predicate over child data paths; pruned children are
                neither validated nor reported as missing

        Returns:
            One issue per violated keyword, empty on success
        """
        if value is MISSING:
            return []

        node = self.node
        if value is None:
            if node.nullable or (isinstance(node, EnumNode) and None in node.values):
                return []
            return [self._type_issue(value, data_path)]

        errors = list(self._checker.iter_errors(value))
        type_errors = [error for error in errors if error.validator == "type"]
        if type_errors:
            return [self._type_issue(value, data_path)]

        base = parse_path(data_path) if data_path else []
        issues = []
        for error in sorted(errors, key=_keyword_rank):
            child_path = format_path([*base, *error.path]) if error.path else data_path
            if error.path and prune is not None and prune(child_path):
                continue
            issues.append(self._to_issue(error, child_path, data_path))

        if recursive and self.children:
            issues.extend(self._run_children(value, base, prune))
        return issues

    def issue(
        self,
        data_path: str,
        message: str,
        rule: str,
        suggested_fix: str | None = None,
        allowed_values: tuple[Any, ...] = (),
        schema_path: str | None = None,
    ) -> ValidationIssue:
        return ValidationIssue(
            schema_path=self.node.path if schema_path is None else schema_path,
            data_path=data_path,
            message=message,
            rule=rule,
            severity=Severity.ERROR,
            suggested_fix=suggested_fix,
            allowed_values=allowed_values,
        )

    def _type_issue(self, value: Any, data_path: str) -> ValidationIssue:
        expected = " or ".join(t for t in self.node.types if t != "null") or "a value"
        if isinstance(self.node, EnumNode) and not self.node.types:
            expected = "one of the allowed values"
        return self.issue(
            data_path,
            f"Expected {expected} but received {json_type(value)}",
            "type",
            suggested_fix=f"Provide a value of type {expected}",
        )

    def _to_issue(self, error: ValidationError, issue_path: str, data_path: str) -> ValidationIssue:
        """Translate one keyword error into an issue with a readable message."""
        keyword = error.validator
        limit = error.validator_value
        label = field_label(data_path, self.node)

        if keyword == "required":
            name = error.path[-1]
            child = self.children.get(name)
            return self.issue(
                issue_path,
                f"Required field '{name}' is missing",
                "required",
                suggested_fix=f"The field '{name}' is required",
                schema_path=child.node.path if child is not None else None,
            )
        if keyword == "additionalProperties":
            name = error.path[-1]
            return self.issue(
                issue_path,
                f"Unknown field '{name}' is not allowed",
                "additionalProperties",
                suggested_fix=f"Remove the field '{name}'",
            )
        if keyword == "enum":
            options = ", ".join(str(value) for value in limit if value is not None)
            return self.issue(
                issue_path,
                f"Invalid value for {label}. Must be one of: {options}",
                "enum",
                suggested_fix=f"Must be one of: {options}",
                allowed_values=tuple(limit),
            )
        if keyword == "pattern":
            return self.issue(
                issue_path,
                "Value does not match required pattern",
                "pattern",
                suggested_fix=f"Must match pattern {limit}",
            )
        if keyword == "format":
            return self.issue(
                issue_path,
                f"Invalid {limit} format for {label}",
                "format",
                suggested_fix=f"Must be in {limit} format",
            )
        if keyword == "minLength":
            message = "Value must not be empty" if limit == 1 else f"Must be at least {limit} characters long"
            return self.issue(issue_path, message, "minLength")
        if keyword == "maxLength":
            return self.issue(issue_path, f"Must be at most {limit} characters long", "maxLength")
        if keyword in BOUND_MESSAGES:
            message = f"{BOUND_MESSAGES[keyword]} {format_limit(limit)}"
            return self.issue(issue_path, message, keyword, suggested_fix=message)
        if keyword == "minItems":
            noun = "item" if limit == 1 else "items"
            return self.issue(issue_path, f"At least {limit} {noun} required", "minItems")
        if keyword == "maxItems":
            noun = "item" if limit == 1 else "items"
            return self.issue(issue_path, f"At most {limit} {noun} allowed", "maxItems")
        if keyword == "uniqueItems":
            return self.issue(issue_path, "Items must be unique", "uniqueItems")
        return self.issue(issue_path, error.message, str(keyword))

    def _run_children(self, value: Any, base: list, prune: Prune | None) -> list[ValidationIssue]:
        issues = []
        items = self.children.get("items")
        if isinstance(self.node, ArrayNode) and isinstance(value, list) and items is not None:
            for index, element in enumerate(value):
                element_path = format_path([*base, index])
                if prune is not None and prune(element_path):
                    continue
                issues.extend(items.run(element, element_path, prune=prune))
        elif isinstance(self.node, ObjectNode) and isinstance(value, dict):
            for name, validator in self.children.items():
                if name not in value:
                    continue
                child_path = format_path([*base, name])
                if prune is not None and prune(child_path):
                    continue
                issues.extend(validator.run(value[name], child_path, prune=prune))
        return issues


BOUND_MESSAGES = {
    "minimum": "Value must be at least",
    "exclusiveMinimum": "Value must be greater than",
    "maximum": "Value must be at most",
    "exclusiveMaximum": "Value must be less than",
}


def _keyword_rank(error: ValidationError) -> int:
    if error.validator in KEYWORD_ORDER:
        return KEYWORD_ORDER.index(error.validator)
    return len(KEYWORD_ORDER)


class ValidationEngine:
    """
    Compiles schema nodes into validators.

    Every node of the repository is compiled once on construction; the
    engine holds no other state.
    """

    def __init__(self, nodes: dict[str, SchemaNode] | None = None):
        self._validators: dict[str, Validator] = {}
        for node in (nodes or {}).values():
            if node.path not in self._validators:
                self._compile(node)

    @classmethod
    def for_repository(cls, repository) -> "ValidationEngine":
        return cls(dict(repository.nodes()))

    def compile(self, node: SchemaNode) -> Validator:
        """Get the validator for a node, compiling it when it is not indexed."""
        validator = self._validators.get(node.path)
        if validator is not None and validator.node is node:
            return validator
        return self._compile(node)

    def _compile(self, node: SchemaNode) -> Validator:
        children = {}
        if isinstance(node, ObjectNode):
            children = {name: self.compile(child) for name, child in node.properties.items()}
        elif isinstance(node, ArrayNode) and node.items is not None:
            children = {"items": self.compile(node.items)}
        validator = Validator(node, children)
        self._validators[node.path] = validator
        return validator
